"""
Result model of the reflective engine and its JSON rendering.

    Success(3)                 → {"value":3}
    Success(None)              → {"value":null}
    Success("say \"hi\"")      → {"value":"say 'hi'"}
    Success(ClassDescription)  → {"value":{"class":...,"fields":[...],"methods":[...]}}
    Failure("Empty command")   → {"error":"Empty command"}

Text payloads have their double quotes replaced by single quotes, as the
browser client shows them verbatim; json.dumps takes care of every other
character that needs escaping.
"""

from dataclasses import dataclass
from typing import Any, Optional
import math

from ..http.response import sanitize_message, to_compact_json


@dataclass(frozen=True)
class ClassDescription:
    """
    Declared members of one type, in declaration order.

    Attributes:
        class_name: Fully qualified name ("collections.OrderedDict", "math").
        fields:     "<type> <name>" strings.
        methods:    "<returnType> <name>(<paramType>, ...)" strings.
    """

    class_name: str
    fields: tuple[str, ...] = ()
    methods: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "class": sanitize_message(self.class_name),
            "fields": [sanitize_message(f) for f in self.fields],
            "methods": [sanitize_message(m) for m in self.methods],
        }


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome of one command: a payload or an error message, never both.

    Build with ExecutionResult.success(...) / ExecutionResult.failure(...).
    """

    payload: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, payload: Any) -> "ExecutionResult":
        return cls(payload=payload)

    @classmethod
    def failure(cls, message: str) -> "ExecutionResult":
        return cls(error=message)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_json(self) -> str:
        if not self.ok:
            return to_compact_json({"error": sanitize_message(self.error)})
        return to_compact_json({"value": json_value(self.payload)})


def json_value(value: Any) -> Any:
    """
    Map an invocation result onto a JSON-encodable value.

    bool and int/float become literals; NaN and the infinities have no JSON
    literal, so they fall through to text like any other object.
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, ClassDescription):
        return value.to_dict()
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return value
    return sanitize_message(str(value))
