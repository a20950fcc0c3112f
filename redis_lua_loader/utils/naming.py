"""
Script name resolution.

Turns a script's file name (extension stripped) into the name it is exposed
under. The default strategy is camelCase, matching how the scripts are
usually called from Python code: ``return_one`` -> ``returnOne``.
"""

import re
from dataclasses import dataclass, field
from typing import Callable

from redis_lua_loader.errors import UsageError

# Runs of "_", "-" and "/" separate words
_SEPARATORS = re.compile(r"[_\-/]+")


def camel_case(value: str) -> str:
    """
    Convert a file base name into camelCase.

    Examples:
        return_one       -> returnOne
        bad-json         -> badJson
        auth/check_token -> authCheckToken
        TEST             -> test
    """
    words = [w for w in _SEPARATORS.split(value.lower()) if w]
    if not words:
        return ""
    return words[0] + "".join(w[:1].upper() + w[1:] for w in words[1:])


def identity(value: str) -> str:
    """Use the file base name unchanged."""
    return value


@dataclass(frozen=True)
class NameResolver:
    """A named, swappable strategy mapping a file base name to a script name."""
    name: str
    func: Callable[[str], str] = field(compare=False)

    def resolve(self, base_name: str) -> str:
        return self.func(base_name)

    __call__ = resolve

    @classmethod
    def of(cls, strategy: "NameResolver | Callable[[str], str] | None") -> "NameResolver":
        """Wrap a plain function (or None for the default) into a resolver."""
        if strategy is None:
            return CAMEL_CASE
        if isinstance(strategy, NameResolver):
            return strategy
        if not callable(strategy):
            raise UsageError(f"Name resolver must be callable, got {type(strategy).__name__}")
        return cls(getattr(strategy, "__name__", "custom"), strategy)


CAMEL_CASE = NameResolver("camel_case", camel_case)
IDENTITY = NameResolver("identity", identity)
