"""
Deterministic types for introspection and invocation tests.

Member order matters: Class(...) lists members in definition order.
"""


class Point:
    ORIGIN = 0
    label: str = "p"

    @staticmethod
    def distance(x: float, y: float) -> float:
        return (x * x + y * y) ** 0.5

    def scaled(self, factor: int) -> "Point":
        return self


class Calculator:
    PRECISION = 2
    name: str = "calc"
    history: list

    @staticmethod
    def add(a: int, b: int) -> int:
        return a + b

    @staticmethod
    def scale(value: float, factor: float) -> float:
        return value * factor

    @staticmethod
    def shout(text: str) -> str:
        return text.upper() + "!"

    @staticmethod
    def answer() -> int:
        return 42

    @classmethod
    def describe(cls) -> str:
        return cls.__name__

    @staticmethod
    def divide(a: int, b: int) -> float:
        return a / b

    @staticmethod
    def quit() -> None:
        raise SystemExit(3)

    @staticmethod
    def nothing() -> None:
        return None

    @staticmethod
    def flag(text: str) -> bool:
        return text == "yes"

    @staticmethod
    def quote(text: str) -> str:
        return f'"{text}"'

    @staticmethod
    def join(*parts):
        return "-".join(str(part) for part in parts)

    @staticmethod
    def untyped(value):
        return repr(value)

    def total(self, extra: int) -> int:
        return extra

    class Inner:
        @staticmethod
        def ping() -> str:
            return "pong"


def module_level(text: str) -> str:
    return text[::-1]
