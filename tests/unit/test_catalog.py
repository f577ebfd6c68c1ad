"""
Unit tests for InspectCatalog: resolution, introspection and invocation.
"""

import builtins
import collections
import inspect
import math
import os
import typing

import pytest

import sample_types
from compreflex.reflection.catalog import InspectCatalog, StaticMethod, render_annotation
from compreflex.reflection.command import ValueKind
from compreflex.reflection.errors import (
    InvocationFault,
    MethodResolutionFailure,
    NotStatic,
    TypeResolutionFailure,
)

INT = ValueKind.INTEGER
DOUBLE = ValueKind.FLOAT64
TEXT = ValueKind.TEXT


@pytest.fixture
def catalog() -> InspectCatalog:
    return InspectCatalog()


class TestResolveType:
    """Tests for InspectCatalog.resolve_type()."""

    def test_module(self, catalog):
        assert catalog.resolve_type("math") is math

    def test_class_in_module(self, catalog):
        assert catalog.resolve_type("collections.OrderedDict") is collections.OrderedDict

    def test_builtin_class(self, catalog):
        assert catalog.resolve_type("builtins.str") is str

    def test_nested_class(self, catalog):
        assert catalog.resolve_type("sample_types.Calculator.Inner") is sample_types.Calculator.Inner

    def test_surrounding_whitespace(self, catalog):
        assert catalog.resolve_type("  math ") is math

    @pytest.mark.parametrize("name", ["nonexistent.Thing", "math.NoSuchThing", "a..b", ""])
    def test_unknown(self, catalog, name: str):
        with pytest.raises(TypeResolutionFailure) as exc_info:
            catalog.resolve_type(name)
        assert "No type named" in str(exc_info.value)

    def test_not_a_type(self, catalog):
        with pytest.raises(TypeResolutionFailure) as exc_info:
            catalog.resolve_type("sample_types.module_level")
        assert str(exc_info.value) == "'sample_types.module_level' is not a class or module"

    def test_type_name(self, catalog):
        assert catalog.type_name(math) == "math"
        assert catalog.type_name(str) == "builtins.str"
        assert catalog.type_name(sample_types.Calculator.Inner) == "sample_types.Calculator.Inner"


class TestAllowList:
    """Tests for the allowed_types restriction."""

    def test_allowed_module_and_children(self):
        catalog = InspectCatalog(allowed_types=("math", "collections"))

        assert catalog.resolve_type("math") is math
        assert catalog.resolve_type("collections.OrderedDict") is collections.OrderedDict

    @pytest.mark.parametrize("name", ["os", "builtins", "mathx"])
    def test_rejected(self, name: str):
        catalog = InspectCatalog(allowed_types=("math",))

        with pytest.raises(TypeResolutionFailure) as exc_info:
            catalog.resolve_type(name)
        assert str(exc_info.value) == f"Type not allowed: {name}"

    def test_rejected_before_import(self, monkeypatch):
        """A disallowed name is never imported."""
        imported = []
        monkeypatch.setattr("importlib.import_module", lambda name: imported.append(name))

        with pytest.raises(TypeResolutionFailure):
            InspectCatalog(allowed_types=("math",)).resolve_type("os")
        assert imported == []

    def test_unrestricted_by_default(self):
        assert InspectCatalog().allowed_types is None
        assert InspectCatalog().is_allowed("anything.at.all")


class TestIntrospection:
    """Tests for list_fields() and list_methods()."""

    def test_point_fields(self, catalog):
        assert catalog.list_fields(sample_types.Point) == ["int ORIGIN", "str label"]

    def test_point_methods(self, catalog):
        assert catalog.list_methods(sample_types.Point) == [
            "float distance(float, float)",
            "Point scaled(int)",
        ]

    def test_annotation_only_fields_come_last(self, catalog):
        assert catalog.list_fields(sample_types.Calculator) == [
            "int PRECISION",
            "str name",
            "list history",
        ]

    def test_methods_in_definition_order(self, catalog):
        assert catalog.list_methods(sample_types.Calculator) == [
            "int add(int, int)",
            "float scale(float, float)",
            "str shout(str)",
            "int answer()",
            "str describe()",
            "float divide(int, int)",
            "None quit()",
            "None nothing()",
            "bool flag(str)",
            "str quote(str)",
            "object join(object...)",
            "object untyped(object)",
            "int total(int)",
        ]

    def test_inherited_members_excluded(self, catalog):
        class Child(sample_types.Point):
            EXTRA = "x"

        assert catalog.list_fields(Child) == ["str EXTRA"]
        assert catalog.list_methods(Child) == []

    def test_module_members(self, catalog):
        assert catalog.list_fields(sample_types) == []
        assert catalog.list_methods(sample_types) == ["str module_level(str)"]

    def test_builtin_module(self, catalog):
        fields = catalog.list_fields(math)
        methods = catalog.list_methods(math)

        assert "float pi" in fields
        assert any(method.startswith("object sqrt(") for method in methods)

    @pytest.mark.parametrize("module", [os, builtins, typing])
    def test_module_routines_are_never_fields(self, catalog, module):
        """Functions a module imported from elsewhere are not its fields."""
        fields = catalog.list_fields(module)

        assert fields
        for field in fields:
            name = field.rsplit(" ", 1)[1]
            assert not inspect.isroutine(getattr(module, name)), field

    def test_reexported_c_functions_are_methods(self, catalog):
        names = [method.split("(")[0].rsplit(" ", 1)[1] for method in catalog.list_methods(os)]

        assert "getcwd" in names
        assert "_check_methods" not in names

    def test_dunders_skipped(self, catalog):
        methods = catalog.list_methods(collections.OrderedDict)

        assert methods
        assert not any(" __" in method for method in methods)

    def test_property_field(self, catalog):
        class WithProperty:
            @property
            def size(self) -> int:
                return 1

        assert catalog.list_fields(WithProperty) == ["property size"]
        assert catalog.list_methods(WithProperty) == []


class TestFindStaticMethod:
    """Tests for find_static_method()."""

    def test_staticmethod(self, catalog):
        method = catalog.find_static_method(sample_types.Calculator, "add", [INT, INT])

        assert isinstance(method, StaticMethod)
        assert method.signature == "sample_types.Calculator.add(int, int)"
        assert method.function(2, 3) == 5

    def test_classmethod(self, catalog):
        method = catalog.find_static_method(sample_types.Calculator, "describe", [])
        assert method.function() == "Calculator"

    def test_module_function(self, catalog):
        method = catalog.find_static_method(sample_types, "module_level", [TEXT])
        assert method.function("abc") == "cba"

    def test_builtin_classmethod_descriptor(self, catalog):
        method = catalog.find_static_method(dict, "fromkeys", [TEXT])
        assert method.function("ab") == {"a": None, "b": None}

    def test_instance_method_not_static(self, catalog):
        with pytest.raises(NotStatic) as exc_info:
            catalog.find_static_method(sample_types.Calculator, "total", [INT])
        assert str(exc_info.value) == "Only static methods allowed"

    def test_builtin_instance_method_not_static(self, catalog):
        with pytest.raises(NotStatic):
            catalog.find_static_method(str, "upper", [])

    def test_missing_method(self, catalog):
        with pytest.raises(MethodResolutionFailure) as exc_info:
            catalog.find_static_method(sample_types.Calculator, "missing", [])
        assert str(exc_info.value) == "No method sample_types.Calculator.missing()"

    def test_field_is_not_a_method(self, catalog):
        with pytest.raises(MethodResolutionFailure):
            catalog.find_static_method(sample_types.Calculator, "PRECISION", [])

    def test_kind_mismatch(self, catalog):
        with pytest.raises(MethodResolutionFailure) as exc_info:
            catalog.find_static_method(sample_types.Calculator, "add", [DOUBLE, INT])
        assert str(exc_info.value) == "No method sample_types.Calculator.add(double, int)"

    def test_arity_mismatch(self, catalog):
        with pytest.raises(MethodResolutionFailure):
            catalog.find_static_method(sample_types.Calculator, "add", [INT])

    def test_unannotated_accepts_any_kind(self, catalog):
        for kind in ValueKind:
            assert catalog.find_static_method(sample_types.Calculator, "untyped", [kind])

    def test_variadic(self, catalog):
        method = catalog.find_static_method(sample_types.Calculator, "join", [TEXT, INT])
        assert method.function("a", 1) == "a-1"

    def test_reexported_c_function(self, catalog):
        """os.getcwd is defined in posix / nt but is part of os."""
        method = catalog.find_static_method(os, "getcwd", [])
        assert method.function() == os.getcwd()

    def test_imported_python_function_is_not_a_method(self, catalog):
        with pytest.raises(MethodResolutionFailure):
            catalog.find_static_method(os, "_check_methods", [TEXT])

    def test_imported_function_is_not_declared(self, catalog):
        """A module's imports are not its methods."""
        with pytest.raises(MethodResolutionFailure):
            catalog.find_static_method(pytest, "approx", [INT])


class TestInvokeStatic:
    """Tests for invoke_static()."""

    def test_result(self, catalog):
        method = catalog.find_static_method(sample_types.Calculator, "add", [INT, INT])
        assert catalog.invoke_static(method, [2, 3]) == 5

    def test_exception_wrapped(self, catalog):
        method = catalog.find_static_method(sample_types.Calculator, "divide", [INT, INT])

        with pytest.raises(InvocationFault) as exc_info:
            catalog.invoke_static(method, [1, 0])

        assert isinstance(exc_info.value.cause, ZeroDivisionError)
        assert exc_info.value.describe() == "InvocationFault: ZeroDivisionError: division by zero"

    def test_system_exit_wrapped(self, catalog):
        method = catalog.find_static_method(sample_types.Calculator, "quit", [])

        with pytest.raises(InvocationFault) as exc_info:
            catalog.invoke_static(method, [])

        assert str(exc_info.value) == "SystemExit: 3"


class TestRenderAnnotation:

    @pytest.mark.parametrize("annotation, expected", [
        (int, "int"),
        (collections.OrderedDict, "collections.OrderedDict"),
        (None, "None"),
        ("Widget", "Widget"),
        (list[int], "list[int]"),
    ])
    def test_render(self, annotation, expected: str):
        assert render_annotation(annotation) == expected
