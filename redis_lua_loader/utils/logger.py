"""
Logger
Structured logging for the loader and its CLI.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def resolve_level(level: str | int) -> int:
    """Map a level name ("info", "DEBUG") or number to a logging level."""
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.DEBUG)


class Logger:
    """Thin wrapper over a stdlib logger that writes to stderr."""
    
    def __init__(self, name: str = "redis-lua-loader", level: str | int = "DEBUG"):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(resolve_level(level))
        
        # Only add handler if none exist
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(resolve_level(level))
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            self.logger.addHandler(handler)
    
    def child(self, suffix: str) -> "Logger":
        """Logger for a sub-component, sharing this logger's handler."""
        child = Logger.__new__(Logger)
        child.name = f"{self.name}.{suffix}"
        child.logger = self.logger.getChild(suffix)
        return child
    
    def debug(self, message: str, extra: Optional[dict] = None):
        self.logger.debug(message, extra=extra)
    
    def info(self, message: str, extra: Optional[dict] = None):
        self.logger.info(message, extra=extra)
    
    def warning(self, message: str, extra: Optional[dict] = None):
        self.logger.warning(message, extra=extra)
    
    def error(self, message: str, extra: Optional[dict] = None):
        self.logger.error(message, extra=extra)
    
    def isEnabledFor(self, level: int) -> bool:
        return self.logger.isEnabledFor(level)
