"""Case lookup automation for the PJUD virtual judicial office."""

__version__ = "0.1.0"
