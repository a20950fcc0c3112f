"""
Execution Module

Script callables plus readiness and error signalling.
"""

from .invocation import ScriptFunction
from .signals import ReadinessGate, ReadinessState, ErrorChannel

__all__ = [
    "ScriptFunction",
    "ReadinessGate",
    "ReadinessState",
    "ErrorChannel",
]
