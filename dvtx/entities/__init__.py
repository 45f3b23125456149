from .account import Account
from .base import Entity
from .contact import Contact

__all__ = ["Account", "Contact", "Entity"]
