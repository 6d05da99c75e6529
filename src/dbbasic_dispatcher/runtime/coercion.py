"""
Coercion

Converts loosely-typed input (values decoded from JSON, form data, CLI
arguments) into the exact types a method declares, so the strict type
check in run_method() accepts them.

Each value goes through a JSON round-trip: it is encoded with json.dumps
and decoded back typed as the declared parameter, using a pydantic
TypeAdapter in lax mode. "3" becomes 3 for an int parameter, a dict
becomes a dataclass, a list of strings becomes list[int], and so on.

validate_param() shapes a single param into an argument list:
- No declared parameters  -> []
- One declared parameter  -> [coerce(param)]
- Two or more             -> param must be a list or tuple, coerced
                             element by element
"""

import functools
import json
from typing import Any, List, Optional

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticUserError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from ..core.errors import (
    CoercionError,
    InvalidArgExpectedSliceError,
    InvalidArgumentsCountError,
)
from ..core.registry import ServiceRegistry
from ..core.signature import MethodSignature
from .invoker import expected_type_at, is_open_type


def validate_param(
    registry: ServiceRegistry,
    service_name: str,
    method_name: str,
    param: Any,
) -> List[Any]:
    """
    Convert a param into the argument list a method expects.

    Args:
        registry: Registry holding the service
        service_name: Registered service name
        method_name: Public method name
        param: Single value, or list/tuple of values for several parameters

    Returns:
        Argument list ready for run_method()

    Raises:
        NonExistentServiceError: If the service is not registered
        NonExistentMethodError: If the method is not registered
        InvalidArgExpectedSliceError: If several parameters are declared
                                      and param is not a list or tuple
        InvalidArgumentsCountError: If the list length does not fit
        CoercionError: If a value cannot be converted
    """
    signature = registry.get_method(service_name, method_name)

    if signature.is_variadic:
        return _validate_variadic(signature, param)

    arg_types = signature.parameter_types

    if len(arg_types) == 0:
        return []

    if len(arg_types) == 1:
        return [coerce(param, arg_types[0], position=0)]

    if not _is_sequence(param):
        raise InvalidArgExpectedSliceError(signature.name, param)

    if len(param) != len(arg_types):
        raise InvalidArgumentsCountError(signature.name, str(len(arg_types)), len(param))

    return [
        coerce(value, arg_type, position=i)
        for i, (value, arg_type) in enumerate(zip(param, arg_types))
    ]


def _validate_variadic(signature: MethodSignature, param: Any) -> List[Any]:
    """
    Variadic methods take the whole argument list as one sequence.

    A bare value is accepted as a one-element list when at most one fixed
    parameter is declared.
    """
    fixed = signature.fixed_count

    if _is_sequence(param):
        values = list(param)
    elif param is None and fixed == 0:
        values = []
    elif fixed <= 1:
        values = [param]
    else:
        raise InvalidArgExpectedSliceError(signature.name, param)

    if len(values) < fixed:
        raise InvalidArgumentsCountError(signature.name, f"at least {fixed}", len(values))

    return [
        coerce(value, expected_type_at(signature, i), position=i)
        for i, value in enumerate(values)
    ]


def coerce(value: Any, target: Any, position: Optional[int] = None) -> Any:
    """
    Convert a value into the target type through a JSON round-trip.

    Args:
        value: Input value
        target: Declared parameter type
        position: Argument index, for error messages

    Returns:
        Value of the target type

    Raises:
        CoercionError: If encoding or decoding fails
    """
    try:
        data = json.dumps(to_jsonable_python(value))
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise CoercionError(target, f"value is not JSON-encodable: {e}", position) from e

    if is_open_type(target):
        return json.loads(data)

    try:
        return _type_adapter(target).validate_json(data)
    except ValidationError as e:
        raise CoercionError(target, _first_error(e), position) from e
    except PydanticUserError as e:
        raise CoercionError(target, f"unsupported parameter type: {e}", position) from e


def _type_adapter(target: Any) -> TypeAdapter:
    """Helper: TypeAdapter for a target type, cached when hashable"""
    try:
        hash(target)
    except TypeError:
        return TypeAdapter(target)
    return _cached_type_adapter(target)


@functools.lru_cache(maxsize=256)
def _cached_type_adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def _first_error(error: ValidationError) -> str:
    """Helper: short description of the first validation failure"""
    errors = error.errors()
    if not errors:
        return str(error)
    first = errors[0]
    location = '.'.join(str(part) for part in first.get('loc', ()))
    if location:
        return f"{location}: {first['msg']}"
    return first['msg']


def _is_sequence(param: Any) -> bool:
    return isinstance(param, (list, tuple))
