from .base import DataPlatform
from .session import DbSession
from .sql import SqlPlatform, make_engine

__all__ = [
    "DataPlatform",
    "DbSession",
    "SqlPlatform",
    "make_engine",
]
