"""
=============================================================================
REFLECTIVE EXECUTION ENGINE
=============================================================================

Takes the raw 'comando' text and always produces a JSON result body:

    raw text
       │
       ▼
    parse_command()            EmptyCommand / MalformedCommand
       │
       ▼
    dispatch on operation      UnknownOperation / ArityMismatch
       │
       ├── Class(T)            → describe T
       │
       └── *Invoke(T, m, ...)
              │
              ├─ 1. resolve T                   TypeResolutionFailure
              ├─ 2. coerce (kind, value) pairs  UnsupportedType / ValueCoercionFailure
              ├─ 3. find m by name + kinds      MethodResolutionFailure
              ├─ 4. check m is static           NotStatic
              └─ 5. call m                      InvocationFault
       │
       ▼
    ExecutionResult.to_json()  {"value": ...} or {"error": "..."}

Every failure becomes a result; execute() never raises. The engine keeps no
state between commands, so one instance can serve every worker thread.

=============================================================================
"""

from typing import Any, Callable, Optional
import logging

from .catalog import InspectCatalog, TypeCatalog
from .command import Command, TypedValue, parse_command
from .errors import ArityMismatch, CommandError, UnknownOperation
from .results import ClassDescription, ExecutionResult


logger = logging.getLogger(__name__)


class ReflectiveEngine:
    """
    Executes commands against a TypeCatalog.

    Example:
        engine = ReflectiveEngine()
        engine.execute("unaryInvoke(builtins, abs, int, -3)")
        # '{"value":3}'
    """

    def __init__(self, catalog: Optional[TypeCatalog] = None):
        self.catalog = catalog or InspectCatalog()

        # operation name → (argument count, implementation)
        self._operations: dict[str, tuple[int, Callable[[Command], Any]]] = {
            "Class": (1, self._describe_class),
            "invoke": (2, self._invoke),
            "unaryInvoke": (4, self._invoke),
            "binaryInvoke": (6, self._invoke),
        }

    @property
    def operations(self) -> list[str]:
        return list(self._operations)

    def execute(self, raw: str) -> str:
        """Parse, run and serialize one command."""
        logger.debug(f"Command: {raw!r}")
        try:
            command = parse_command(raw)
        except CommandError as e:
            return self._failed(e.describe()).to_json()
        return self.execute_command(command).to_json()

    def execute_command(self, command: Command) -> ExecutionResult:
        entry = self._operations.get(command.operation)
        try:
            if entry is None:
                raise UnknownOperation(f"Unknown operation: {command.operation}")
            arity, run = entry
            if command.arity != arity:
                plural = "argument" if arity == 1 else "arguments"
                raise ArityMismatch(f"{command.operation} expects {arity} {plural}")
            return ExecutionResult.success(run(command))
        except CommandError as e:
            return self._failed(e.describe())
        except Exception as e:
            logger.exception(f"Unexpected error executing {command.operation}")
            return self._failed(f"{type(e).__name__}: {e}")

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def _describe_class(self, command: Command) -> ClassDescription:
        target = self.catalog.resolve_type(command.arguments[0])
        return ClassDescription(
            class_name=self.catalog.type_name(target),
            fields=tuple(self.catalog.list_fields(target)),
            methods=tuple(self.catalog.list_methods(target)),
        )

    def _invoke(self, command: Command) -> Any:
        """invoke / unaryInvoke / binaryInvoke: args are T, m, then (kind, value) pairs."""
        type_name, method_name, *pairs = command.arguments
        target = self.catalog.resolve_type(type_name)

        kinds = []
        coerced = []
        for i in range(0, len(pairs), 2):
            # Each pair fails on its kind before its value, left to right
            value = TypedValue.parse(pairs[i], pairs[i + 1])
            coerced.append(value.coerce())
            kinds.append(value.kind)

        method = self.catalog.find_static_method(target, method_name.strip(), kinds)
        return self.catalog.invoke_static(method, coerced)

    @staticmethod
    def _failed(message: str) -> ExecutionResult:
        logger.info(f"Command failed: {message}")
        return ExecutionResult.failure(message)
