"""Network transports for the command broker."""
from .http import HttpBridge, create_app

__all__ = [
    "HttpBridge",
    "create_app",
]
