"""
Reflective command execution.

    command.py   'comando' text → Command, typed argument coercion
    catalog.py   TypeCatalog capability, InspectCatalog (importlib + inspect)
    engine.py    ReflectiveEngine: Command → ExecutionResult → JSON
    results.py   ExecutionResult, ClassDescription
    errors.py    CommandError taxonomy
"""

from .catalog import InspectCatalog, StaticMethod, TypeCatalog
from .command import Command, TypedValue, ValueKind, parse_command, split_arguments
from .engine import ReflectiveEngine
from .errors import CommandError
from .results import ClassDescription, ExecutionResult

__all__ = [
    "Command",
    "TypedValue",
    "ValueKind",
    "parse_command",
    "split_arguments",
    "TypeCatalog",
    "InspectCatalog",
    "StaticMethod",
    "ReflectiveEngine",
    "CommandError",
    "ClassDescription",
    "ExecutionResult",
]
