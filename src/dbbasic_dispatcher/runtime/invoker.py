"""
Invoker

Calls a registered method by name after checking the supplied arguments
against its captured signature.

Rules:
- Non-variadic methods take exactly their declared number of arguments
- Variadic methods take at least their fixed arguments; the variadic
  slot may be empty
- Every argument's exact type must be the declared type
  (type(arg) is T, so True does not pass for int)
- Any, object, unannotated and Protocol parameters accept every value
- Generic aliases match on their origin (list[int] matches any list)
- Abstract classes (Sequence, Mapping, Callable, user ABCs) match by
  isinstance, since no value is exactly of an abstract type
- Unions match when any member matches

Results come back as a list. Exceptions raised by the method itself
propagate unchanged.
"""

import inspect
import types
import typing
from typing import Any, List, Optional, Sequence

from ..core.errors import InvalidArgumentsCountError, InvalidArgumentTypeError
from ..core.registry import ServiceData, ServiceRegistry
from ..core.signature import MethodSignature


_NONE_TYPE = type(None)
_UNION_ORIGINS = (typing.Union, types.UnionType)


def run_method(
    registry: ServiceRegistry,
    service_name: str,
    method_name: str,
    *args: Any,
) -> List[Any]:
    """
    Run a service method with the given arguments.

    Args:
        registry: Registry holding the service
        service_name: Registered service name
        method_name: Public method name
        *args: Positional arguments, receiver excluded

    Returns:
        The method's results as a list

    Raises:
        NonExistentServiceError: If the service is not registered
        NonExistentMethodError: If the method is not registered
        InvalidArgumentsCountError: If the arity rule is violated
        InvalidArgumentTypeError: If an argument has the wrong exact type
    """
    service, signature = registry.resolve(service_name, method_name)

    check_arguments(signature, args)

    return invoke(service, signature, args)


def invoke(service: ServiceData, signature: MethodSignature, args: Sequence[Any]) -> List[Any]:
    """Bind the receiver and call the method. Arguments must already be checked."""
    receiver = service.receiver_for(signature)
    output = signature.function(receiver, *args)

    return collect_results(signature, output)


def check_arguments(signature: MethodSignature, args: Sequence[Any]) -> None:
    """Raise if args do not satisfy the signature's count and type rules"""
    if not verify_argument_count(signature, args):
        if signature.is_variadic:
            expected = f"at least {signature.fixed_count}"
        else:
            expected = str(signature.args_count - 1)
        raise InvalidArgumentsCountError(signature.name, expected, len(args))

    position = find_type_mismatch(signature, args)
    if position is not None:
        raise InvalidArgumentTypeError(
            signature.name,
            position,
            expected_type_at(signature, position),
            type(args[position]),
        )


def verify_argument_count(signature: MethodSignature, args: Sequence[Any]) -> bool:
    if signature.is_variadic:
        # An empty variadic slot is always fine
        return len(args) >= signature.fixed_count

    return len(args) + 1 == signature.args_count


def find_type_mismatch(signature: MethodSignature, args: Sequence[Any]) -> Optional[int]:
    """
    Find the first argument whose type does not match.

    Returns:
        Index into args of the first mismatch, or None when all match
    """
    fixed_types = signature.fixed_types

    for i, declared in enumerate(fixed_types):
        if not matches_type(args[i], declared):
            return i

    if not signature.is_variadic:
        return None

    element_type = signature.variadic_type
    if is_open_type(element_type):
        return None

    for i in range(len(fixed_types), len(args)):
        if not matches_type(args[i], element_type):
            return i

    return None


def expected_type_at(signature: MethodSignature, position: int) -> Any:
    """Declared type for the argument at a position, receiver excluded"""
    if position < signature.fixed_count:
        return signature.fixed_types[position]
    return signature.variadic_type


def matches_type(value: Any, declared: Any) -> bool:
    """
    Check that a value's exact runtime type is the declared type.

    Args:
        value: Argument value
        declared: Captured annotation

    Returns:
        True if the value is acceptable for the declared type
    """
    if is_open_type(declared):
        return True

    if declared is None:
        return value is None

    origin = typing.get_origin(declared)

    if origin in _UNION_ORIGINS:
        return any(matches_type(value, member) for member in typing.get_args(declared))

    if origin is typing.Annotated:
        return matches_type(value, typing.get_args(declared)[0])

    if origin is not None:
        # Literal, ClassVar and friends have no class to compare against
        if not isinstance(origin, type):
            return True
        return _matches_class(value, origin)

    if isinstance(declared, type):
        return _matches_class(value, declared)

    # TypeVar, NewType and other non-class annotations
    return True


def _matches_class(value: Any, cls: type) -> bool:
    # No value has an abstract class as its exact type
    if inspect.isabstract(cls):
        return isinstance(value, cls)
    return type(value) is cls


def is_open_type(declared: Any) -> bool:
    """Check whether a declared type accepts values of any type"""
    if declared is Any or declared is object:
        return True
    return isinstance(declared, type) and getattr(declared, '_is_protocol', False)


def collect_results(signature: MethodSignature, output: Any) -> List[Any]:
    """
    Turn a method's return value into the ordered result list.

    - Declared '-> None' (or unannotated returning None): []
    - Declared fixed-size tuple: the tuple's elements
    - Anything else: [output]
    """
    return_type = signature.return_type

    if return_type is _NONE_TYPE or return_type is None:
        return []

    if is_open_type(return_type) and output is None:
        return []

    if typing.get_origin(return_type) is tuple and isinstance(output, tuple):
        members = typing.get_args(return_type)
        if members and not (len(members) == 2 and members[1] is Ellipsis):
            return list(output)

    return [output]
