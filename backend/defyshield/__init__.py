"""DefyShield smart-contract audit service."""

__version__ = "0.1.0"
