"""Utilities: logging and script name resolution."""

from .logger import Logger
from .naming import NameResolver, camel_case, identity, CAMEL_CASE, IDENTITY

__all__ = ["Logger", "NameResolver", "camel_case", "identity", "CAMEL_CASE", "IDENTITY"]
