"""
Test fixture: services covering every kind of method signature
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class Payload:
    foo: str


class MockService:
    def _unexported(self):
        pass

    def __str__(self):
        return 'MockService'

    def exported(self) -> None:
        pass

    def method_with_arguments(self, text: str, integer: int) -> None:
        pass

    def method_with_ptr_arguments(self, other: 'MockService') -> None:
        pass

    def method_with_return_value(self, text: str, integer: int) -> tuple[str, int]:
        return text, integer

    def method_with_ptr_arguments_and_return_value(self, other: 'MockService') -> 'MockService':
        return other

    def method_with_array_arguments(self, items: list[str]) -> None:
        pass

    def method_with_array_arguments_and_return_value(self, items: list[int]) -> list[int]:
        return items

    def method_with_one_argument_string(self, value: str) -> str:
        return value

    def method_with_one_argument_integer(self, value: int) -> int:
        return value

    def method_with_one_argument_boolean(self, value: bool) -> bool:
        return value

    def method_with_one_argument_float(self, value: float) -> float:
        return value

    def method_with_one_argument_object(self, value: Payload) -> Payload:
        return value

    def method_with_optional_argument(self, value: Optional[int]) -> Optional[int]:
        return value

    def method_with_union_argument(self, value: int | str) -> int | str:
        return value

    def method_with_dict_argument(self, mapping: dict[str, int]) -> int:
        return sum(mapping.values())

    def method_with_sequence_argument(self, values: Sequence[int]) -> int:
        return sum(values)

    def method_with_callable_argument(self, func: Callable[[int], int]) -> int:
        return func(2)

    def method_with_any_argument(self, value: Any) -> Any:
        return value

    def method_without_annotations(self, value):
        return value

    def method_returning_none_untyped(self):
        return None

    def method_with_keyword_only(self, value: int, *, scale: int = 2) -> int:
        return value * scale

    def method_that_raises(self) -> None:
        raise RuntimeError('Something went wrong')

    @classmethod
    def create(cls, name: str) -> str:
        return f'{cls.__name__}:{name}'

    @staticmethod
    def helper(value: int) -> int:
        return value

    @property
    def status(self) -> str:
        return 'ok'


class MockServiceVariadic:
    def method_with_variadic_arguments(self, *args: Any) -> int:
        return len(args)


class MockServiceTypedVariadic:
    def join(self, separator: str, *parts: str) -> str:
        return separator.join(parts)

    def scale(self, factor: int, *values: int) -> list[int]:
        return [factor * v for v in values]


class MockServiceUnresolved:
    def method_with_unknown_type(self, value: 'DoesNotExist') -> None:  # noqa: F821
        pass


class Opaque:
    """Not JSON-encodable"""
    pass
