"""
Dispatcher errors

Every failure the dispatcher reports is one of the exceptions below.
They are raised to the immediate caller and never retried, logged or
swallowed internally.

Design principles:
- One exception class per failure kind
- All derive from DispatcherError so callers can catch them together
- Each also derives from the closest built-in (LookupError, TypeError,
  ValueError) so generic handlers keep working
- Messages name the service, method and argument position involved
"""

from typing import Any, Optional


class DispatcherError(Exception):
    """Base exception for dispatcher-related errors"""
    pass


class ConfigError(DispatcherError, ValueError):
    """Raised when a configuration value is invalid"""
    pass


class InvalidServiceTypeError(DispatcherError, TypeError):
    """Raised when a registered object is not an instance of a user class"""

    def __init__(self, service_name: str, instance: Any):
        self.service_name = service_name
        self.instance_type = type(instance)
        super().__init__(
            f"Service '{service_name}' must be an instance of a user-defined class, "
            f"got {_type_name(self.instance_type)}"
        )


class InvalidServiceNameError(DispatcherError, ValueError):
    """Raised when a service name cannot be used as its log directory"""

    def __init__(self, service_name: str, reason: str):
        self.service_name = service_name
        self.reason = reason
        super().__init__(f"Invalid service name {service_name!r}: {reason}")


class VariadicMethodError(DispatcherError, TypeError):
    """Raised when variadic methods are refused by the registration policy"""

    def __init__(self, service_name: str, method_name: str):
        self.service_name = service_name
        self.method_name = method_name
        super().__init__(
            f"Service '{service_name}' exposes variadic method '{method_name}', "
            f"which the 'reject' variadic policy does not allow"
        )


class NonExistentServiceError(DispatcherError, LookupError):
    """Raised when a service name is not registered"""

    def __init__(self, service_name: str):
        self.service_name = service_name
        super().__init__(f"Service '{service_name}' is not registered in the dispatcher")


class NonExistentMethodError(DispatcherError, LookupError):
    """Raised when a method is absent or not public on a registered service"""

    def __init__(self, service_name: str, method_name: str):
        self.service_name = service_name
        self.method_name = method_name
        super().__init__(
            f"Method '{method_name}' is not registered for service '{service_name}'"
        )


class InvalidArgumentsCountError(DispatcherError, TypeError):
    """Raised when the number of supplied arguments violates the method arity"""

    def __init__(self, method_name: str, expected: str, given: int):
        self.method_name = method_name
        self.expected = expected
        self.given = given
        super().__init__(
            f"Invalid number of arguments for '{method_name}': "
            f"expected {expected}, got {given}"
        )


class InvalidArgumentTypeError(DispatcherError, TypeError):
    """Raised when a supplied argument's exact type differs from the declared one"""

    def __init__(self, method_name: str, position: int, expected: Any, actual: type):
        self.method_name = method_name
        self.position = position
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Invalid argument type for '{method_name}' at position {position}: "
            f"expected {_type_name(expected)}, got {_type_name(actual)}"
        )


class InvalidArgExpectedSliceError(DispatcherError, TypeError):
    """Raised when validate() needs a list of parameters but got a single value"""

    def __init__(self, method_name: str, param: Any):
        self.method_name = method_name
        self.param_type = type(param)
        super().__init__(
            f"Invalid arguments for '{method_name}': expected a list or tuple, "
            f"got {_type_name(self.param_type)}"
        )


class CoercionError(DispatcherError, ValueError):
    """Raised when a value cannot be converted into a declared parameter type"""

    def __init__(self, target: Any, reason: str, position: Optional[int] = None):
        self.target = target
        self.position = position
        self.reason = reason
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Cannot coerce value{where} to {_type_name(target)}: {reason}")


def _type_name(tp: Any) -> str:
    """Helper: readable name for a type or annotation"""
    if isinstance(tp, type):
        if tp.__module__ == 'builtins':
            return tp.__qualname__
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp)
