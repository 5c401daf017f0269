from .base import Client

__all__ = [
    "Client",
]
