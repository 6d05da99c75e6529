"""
dbbasic-dispatcher: name-addressed method invocation.

Register any object under a name, then call its public methods by name
with a flat list of arguments. Argument count and exact types are checked
against the method's real signature before the call is made.

The dispatcher provides:
- Service registration with signature capture
- Strict invocation (arity and exact type checks, variadic methods)
- Coercion of loosely-typed input into declared parameter types
- Per-service call logs (TSV)

Example:
    >>> from dbbasic_dispatcher import Dispatcher
    >>>
    >>> class Calculator:
    ...     def add(self, a: int, b: int) -> int:
    ...         return a + b
    >>>
    >>> dispatcher = Dispatcher()
    >>> dispatcher.register('calc', Calculator())
    >>> dispatcher.run('calc', 'add', 3, 4)
    [7]
    >>> dispatcher.validate('calc', 'add', ['3', '4'])
    [3, 4]

Philosophy:
    The dispatcher doesn't care how a call arrived (HTTP, RPC, CLI).
    Transports decode the request, validate() normalizes the values,
    run() makes the call.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config import DispatcherConfig, get_config, reload_config
from .core.errors import (
    CoercionError,
    ConfigError,
    DispatcherError,
    InvalidArgExpectedSliceError,
    InvalidArgumentsCountError,
    InvalidArgumentTypeError,
    InvalidServiceNameError,
    InvalidServiceTypeError,
    NonExistentMethodError,
    NonExistentServiceError,
    VariadicMethodError,
)
from .core.registry import ServiceData, ServiceRegistry
from .core.signature import MethodSignature
from .runtime.coercion import coerce, validate_param
from .runtime.dispatcher import Dispatcher
from .runtime.invoker import run_method

__all__ = [
    "__version__",
    "Dispatcher",
    "DispatcherConfig",
    "get_config",
    "reload_config",
    "ServiceRegistry",
    "ServiceData",
    "MethodSignature",
    "run_method",
    "validate_param",
    "coerce",
    # Errors
    "DispatcherError",
    "ConfigError",
    "InvalidServiceNameError",
    "InvalidServiceTypeError",
    "VariadicMethodError",
    "NonExistentServiceError",
    "NonExistentMethodError",
    "InvalidArgumentsCountError",
    "InvalidArgumentTypeError",
    "InvalidArgExpectedSliceError",
    "CoercionError",
]
