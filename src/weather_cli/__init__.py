"""Weather lookups across interchangeable providers, with aliases and saved defaults."""

__version__ = "0.1.0"
