"""acdat - read legacy game-client DAT archives."""

__version__ = "0.1.0"
