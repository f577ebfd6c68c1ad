"""
=============================================================================
TYPE CATALOG
=============================================================================

The engine never touches importlib or inspect directly. Everything it needs
from the runtime goes through a TypeCatalog:

    ┌───────────────────────────┬────────────────────────────────────────────┐
    │ Capability                │ InspectCatalog does it with                │
    ├───────────────────────────┼────────────────────────────────────────────┤
    │ resolve_type(name)        │ importlib.import_module + getattr walk     │
    │ list_fields(type)         │ vars(type), non-routines, in order         │
    │ list_methods(type)        │ vars(type), routines, inspect.signature    │
    │ find_static_method(...)   │ exact name + static check + bind() check   │
    │ invoke_static(m, args)    │ m.function(*args), faults wrapped          │
    └───────────────────────────┴────────────────────────────────────────────┘

=============================================================================
WHAT "TYPE" AND "STATIC" MEAN IN PYTHON
=============================================================================

A type is anything with declared members that can be named by a dotted
path: a class (collections.OrderedDict, builtins.str) or a module (math).

A method is static when it can be called without an instance:

    module function          math.sqrt             ✓ static
    @staticmethod            str.maketrans         ✓ static
    @classmethod             dict.fromkeys         ✓ static (bound to class)
    plain def in a class     str.upper             ✗ NotStatic

Only the type's OWN members count: vars(cls), never inherited attributes,
and for a module only functions whose __module__ is that module, plus the
C functions it re-exports from its accelerator (os.getcwd lives in posix).
Other names a module imported are neither its methods nor its fields.

=============================================================================
SECURITY NOTE
=============================================================================

Resolving a name imports a module, and invoking a static method runs
arbitrary code (builtins.eval is "a static method of builtins"). Exposing
this to the network is only safe behind an allow-list. Pass
allowed_types=("math", "statistics") to restrict resolution to those names
and their children.

=============================================================================
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Sequence
import importlib
import inspect
import logging
import os
import types

from .command import ValueKind
from .errors import (
    InvocationFault,
    MethodResolutionFailure,
    NotStatic,
    TypeResolutionFailure,
)


logger = logging.getLogger(__name__)

# Members of a class that are callable without an instance
_STATIC_KINDS = (staticmethod, classmethod, types.ClassMethodDescriptorType)

# Members of a class that are methods at all
_METHOD_KINDS = _STATIC_KINDS + (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodDescriptorType,
    types.WrapperDescriptorType,
)

# Annotations that pin a parameter to one of the command kinds
_ANNOTATION_KINDS = {
    int: ValueKind.INTEGER,
    float: ValueKind.FLOAT64,
    str: ValueKind.TEXT,
    "int": ValueKind.INTEGER,
    "float": ValueKind.FLOAT64,
    "str": ValueKind.TEXT,
}


@dataclass(frozen=True)
class StaticMethod:
    """A resolved static method, ready to call."""

    owner: str
    name: str
    function: Callable[..., Any]
    kinds: tuple[ValueKind, ...] = ()

    @property
    def signature(self) -> str:
        """e.g. "math.pow(double, double)"."""
        return f"{self.owner}.{self.name}({', '.join(k.token for k in self.kinds)})"


class TypeCatalog(ABC):
    """
    Capability for resolving types, listing their members and invoking
    their static methods.

    Implementations raise the errors from .errors; the engine converts
    them into Failure results.
    """

    @abstractmethod
    def resolve_type(self, name: str) -> Any:
        """Return the type named by a dotted path, or raise TypeResolutionFailure."""

    @abstractmethod
    def type_name(self, target: Any) -> str:
        """Fully qualified name of a resolved type."""

    @abstractmethod
    def list_fields(self, target: Any) -> list[str]:
        """Declared fields as "<type> <name>", declaration order."""

    @abstractmethod
    def list_methods(self, target: Any) -> list[str]:
        """Declared methods as "<returnType> <name>(<paramType>, ...)", declaration order."""

    @abstractmethod
    def find_static_method(
        self,
        target: Any,
        name: str,
        kinds: Sequence[ValueKind],
    ) -> StaticMethod:
        """
        Resolve a static method by exact name and parameter kinds.

        Raises:
            MethodResolutionFailure: No declared method fits.
            NotStatic: The method needs an instance.
        """

    @abstractmethod
    def invoke_static(self, method: StaticMethod, args: Sequence[Any]) -> Any:
        """Call the method; any fault it raises becomes InvocationFault."""


class InspectCatalog(TypeCatalog):
    """TypeCatalog backed by the interpreter's own introspection."""

    def __init__(self, allowed_types: Optional[Sequence[str]] = None):
        """
        Args:
            allowed_types: Dotted names (and their children) that may be
                           resolved. None means unrestricted.
        """
        self.allowed_types = tuple(allowed_types) if allowed_types else None

    # =========================================================================
    # RESOLUTION
    # =========================================================================

    def is_allowed(self, name: str) -> bool:
        if self.allowed_types is None:
            return True
        return any(name == prefix or name.startswith(prefix + ".")
                   for prefix in self.allowed_types)

    def resolve_type(self, name: str) -> Any:
        """
        Resolve "pkg.module.Class.Inner".

        The longest importable prefix is imported, the rest is walked with
        getattr:

            "collections.OrderedDict"
              import "collections.OrderedDict"   ✗ not a module
              import "collections"               ✓
              getattr(collections, "OrderedDict") ✓ class
        """
        name = name.strip()
        parts = name.split(".")
        if not name or not all(parts):
            raise TypeResolutionFailure(f"No type named '{name}'")
        if not self.is_allowed(name):
            raise TypeResolutionFailure(f"Type not allowed: {name}")

        target = None
        for split in range(len(parts), 0, -1):
            module_name = ".".join(parts[:split])
            try:
                target = importlib.import_module(module_name)
            except ImportError:
                continue
            except Exception as e:
                # The module exists but failed while executing its body
                raise TypeResolutionFailure(
                    f"Importing '{module_name}' failed: {type(e).__name__}: {e}"
                ) from e
            for attribute in parts[split:]:
                try:
                    target = getattr(target, attribute)
                except AttributeError:
                    raise TypeResolutionFailure(f"No type named '{name}'") from None
            break

        if target is None:
            raise TypeResolutionFailure(f"No type named '{name}'")
        if not (inspect.isclass(target) or inspect.ismodule(target)):
            raise TypeResolutionFailure(f"'{name}' is not a class or module")
        return target

    def type_name(self, target: Any) -> str:
        if inspect.ismodule(target):
            return target.__name__
        return f"{target.__module__}.{target.__qualname__}"

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def list_fields(self, target: Any) -> list[str]:
        annotations = _own_annotations(target)
        fields = []
        seen = set()
        for name, raw in _declared(target):
            # Routines are never fields, including those a module imported
            if inspect.isroutine(raw) or self._is_method(target, raw):
                continue
            if inspect.isclass(raw) or inspect.ismodule(raw):
                continue
            if isinstance(raw, property):
                type_label = "property"
            elif name in annotations:
                type_label = render_annotation(annotations[name])
            else:
                type_label = render_annotation(type(raw))
            fields.append(f"{type_label} {name}")
            seen.add(name)

        # Annotated but unassigned: "x: int" in a class body
        for name, annotation in annotations.items():
            if name not in seen and not _is_dunder(name):
                fields.append(f"{render_annotation(annotation)} {name}")
        return fields

    def list_methods(self, target: Any) -> list[str]:
        return [
            self._render_method(target, name, raw)
            for name, raw in _declared(target)
            if self._is_method(target, raw)
        ]

    def _render_method(self, target: Any, name: str, raw: Any) -> str:
        static = self._is_static(target, raw)
        function = getattr(target, name) if static else raw
        try:
            signature = inspect.signature(function)
        except (ValueError, TypeError, NameError):
            # Some C functions carry no signature metadata
            return f"object {name}(...)"

        parameters = list(signature.parameters.values())
        if not static and parameters:
            # The instance parameter ("self")
            parameters = parameters[1:]

        rendered = []
        for parameter in parameters:
            if parameter.kind is inspect.Parameter.VAR_KEYWORD:
                continue
            label = render_annotation(parameter.annotation)
            if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
                label += "..."
            rendered.append(label)

        return_type = render_annotation(signature.return_annotation)
        return f"{return_type} {name}({', '.join(rendered)})"

    # =========================================================================
    # INVOCATION
    # =========================================================================

    def find_static_method(
        self,
        target: Any,
        name: str,
        kinds: Sequence[ValueKind],
    ) -> StaticMethod:
        kinds = tuple(kinds)
        owner = self.type_name(target)
        wanted = StaticMethod(owner=owner, name=name, function=_unresolved, kinds=kinds)

        raw = vars(target).get(name)
        if raw is None or not self._is_method(target, raw):
            raise MethodResolutionFailure(f"No method {wanted.signature}")
        if not self._is_static(target, raw):
            raise NotStatic("Only static methods allowed")

        function = getattr(target, name)
        if not _accepts(function, kinds):
            raise MethodResolutionFailure(f"No method {wanted.signature}")

        return StaticMethod(owner=owner, name=name, function=function, kinds=kinds)

    def invoke_static(self, method: StaticMethod, args: Sequence[Any]) -> Any:
        logger.debug(f"Invoking {method.signature} with {list(args)!r}")
        try:
            return method.function(*args)
        except (Exception, SystemExit) as e:
            raise InvocationFault(e) from e

    # =========================================================================
    # MEMBER CLASSIFICATION
    # =========================================================================

    @staticmethod
    def _is_method(target: Any, raw: Any) -> bool:
        if inspect.ismodule(target):
            return inspect.isroutine(raw) and _defined_in(target, raw)
        return isinstance(raw, _METHOD_KINDS)

    @staticmethod
    def _is_static(target: Any, raw: Any) -> bool:
        return inspect.ismodule(target) or isinstance(raw, _STATIC_KINDS)


# =============================================================================
# HELPERS
# =============================================================================

def render_annotation(annotation: Any) -> str:
    """
    Render a type or annotation for a member description.

        int                      → "int"      (builtins are unqualified)
        collections.OrderedDict  → "collections.OrderedDict"
        (no annotation)          → "object"
        "Widget" (string)        → "Widget"
    """
    if annotation is inspect.Parameter.empty or annotation is inspect.Signature.empty:
        return "object"
    if annotation is None or annotation is type(None):
        return "None"
    if isinstance(annotation, str):
        return annotation
    if inspect.isclass(annotation) and not isinstance(annotation, types.GenericAlias):
        if annotation.__module__ == "builtins":
            return annotation.__qualname__
        return f"{annotation.__module__}.{annotation.__qualname__}"
    return str(annotation).replace("typing.", "")


def _declared(target: Any) -> Iterator[tuple[str, Any]]:
    """Own members in definition order, dunders skipped."""
    for name, raw in list(vars(target).items()):
        if not _is_dunder(name):
            yield name, raw


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _defined_in(module: types.ModuleType, routine: Any) -> bool:
    """
    Is routine one of module's own functions?

    Yes when its __module__ names the module. C functions re-exported from a
    private accelerator also count: os.getcwd comes from posix (or nt),
    io.open from _io. Anything else the module imported does not.
    """
    owner = getattr(routine, "__module__", module.__name__)
    if owner == module.__name__:
        return True
    return (isinstance(routine, types.BuiltinFunctionType)
            and isinstance(owner, str)
            and (owner.startswith("_") or owner == os.name))


def _own_annotations(target: Any) -> dict:
    if not inspect.isclass(target):
        return {}
    try:
        return dict(inspect.get_annotations(target))
    except NameError:
        # Forward reference that cannot be evaluated
        return {}


def _accepts(function: Callable[..., Any], kinds: tuple[ValueKind, ...]) -> bool:
    """
    Would function(*values_of(kinds)) be a valid call?

    Arity is checked with Signature.bind(). A parameter annotated with
    int / float / str must match its kind exactly; other annotations (or
    none) accept any kind. Functions without a signature are accepted.
    """
    try:
        signature = inspect.signature(function)
    except (ValueError, TypeError, NameError):
        return True

    try:
        signature.bind(*range(len(kinds)))
    except TypeError:
        return False

    positional = [
        p for p in signature.parameters.values()
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    variadic = next(
        (p for p in signature.parameters.values() if p.kind is inspect.Parameter.VAR_POSITIONAL),
        None,
    )
    for index, kind in enumerate(kinds):
        parameter = positional[index] if index < len(positional) else variadic
        expected = _ANNOTATION_KINDS.get(parameter.annotation) if parameter is not None else None
        if expected is not None and expected is not kind:
            return False
    return True


def _unresolved(*args: Any) -> Any:
    raise MethodResolutionFailure("method was not resolved")
