"""
Error taxonomy for command parsing and reflective execution.

Every failure the engine can report is a CommandError subclass. The engine
catches them at its boundary and turns them into {"error": "..."} payloads.
Nothing here ever reaches the HTTP layer as an exception.

Two families, distinguished by how the message is shown to the client:

    plain        EmptyCommand, MalformedCommand, UnknownOperation,
                 ArityMismatch, NotStatic
                 → "Unknown operation: Foo"

    categorized  UnsupportedType, ValueCoercionFailure,
                 TypeResolutionFailure, MethodResolutionFailure,
                 InvocationFault
                 → "TypeResolutionFailure: No type named 'foo.Bar'"
"""


class CommandError(Exception):
    """Base class for every failure raised while parsing or running a command."""

    # Prefix the message with the class name when reported to the client
    categorized = True

    @property
    def category(self) -> str:
        return type(self).__name__

    def describe(self) -> str:
        """Client-facing diagnostic for this failure."""
        message = str(self)
        if self.categorized:
            return f"{self.category}: {message}" if message else self.category
        return message or self.category


# ─────────────────────────────────────────────────────────────────────────────
# Grammar and validation
# ─────────────────────────────────────────────────────────────────────────────

class EmptyCommand(CommandError):
    categorized = False


class MalformedCommand(CommandError):
    categorized = False


class UnknownOperation(CommandError):
    categorized = False


class ArityMismatch(CommandError):
    categorized = False


class NotStatic(CommandError):
    """The resolved method needs an instance to be called."""

    categorized = False


# ─────────────────────────────────────────────────────────────────────────────
# Argument typing
# ─────────────────────────────────────────────────────────────────────────────

class UnsupportedType(CommandError):
    """A parameter type token other than int, double or string."""


class ValueCoercionFailure(CommandError):
    """A value does not parse as its declared type."""


# ─────────────────────────────────────────────────────────────────────────────
# Resolution and invocation
# ─────────────────────────────────────────────────────────────────────────────

class TypeResolutionFailure(CommandError):
    """The named class or module could not be found (or is not allowed)."""


class MethodResolutionFailure(CommandError):
    """No declared method matches the name and parameter kinds."""


class InvocationFault(CommandError):
    """The invoked method itself raised."""

    def __init__(self, cause: BaseException):
        super().__init__(f"{type(cause).__name__}: {cause}" if str(cause) else type(cause).__name__)
        self.cause = cause
