"""
Service Registry

Maps service names to registered objects and the method signatures
captured from them at registration time.

Design principles:
- A service is an instance of a user-defined class, never a bare value
- Signatures are captured once, at registration, and never change
- Re-registering a name replaces the previous entry (no merge)
- Lookups and registration share one lock; method bodies never run under it
"""

import inspect
import numbers
import threading
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

from .errors import (
    ConfigError,
    InvalidServiceTypeError,
    NonExistentMethodError,
    NonExistentServiceError,
    VariadicMethodError,
)
from .signature import MethodSignature, capture_signatures


VARIADIC_ACCEPT = 'accept'
VARIADIC_REJECT = 'reject'
VARIADIC_POLICIES = (VARIADIC_ACCEPT, VARIADIC_REJECT)

_VALUE_TYPES = (
    numbers.Number,
    str,
    bytes,
    bytearray,
    memoryview,
    list,
    tuple,
    dict,
    set,
    frozenset,
)


class ServiceData:
    """A registered service: the object and its method signatures"""

    __slots__ = ('_name', '_instance', '_methods')

    def __init__(self, name: str, instance: Any, methods: Dict[str, MethodSignature]):
        self._name = name
        self._instance = instance
        self._methods = MappingProxyType(dict(methods))

    @property
    def name(self) -> str:
        return self._name

    @property
    def instance(self) -> Any:
        return self._instance

    @property
    def methods(self) -> Mapping[str, MethodSignature]:
        return self._methods

    def receiver_for(self, signature: MethodSignature) -> Any:
        """Object to bind as the first argument of a method call"""
        if signature.binds_class:
            return type(self._instance)
        return self._instance

    def __repr__(self) -> str:
        return f"<ServiceData {self._name!r} methods={sorted(self._methods)}>"


class ServiceRegistry:
    """
    Thread-safe registry of named services.

    Usage:
        registry = ServiceRegistry()
        registry.register('calc', Calculator())
        signature = registry.get_method('calc', 'add')
    """

    def __init__(self, variadic_policy: str = VARIADIC_ACCEPT):
        """
        Initialize registry.

        Args:
            variadic_policy: 'accept' to register variadic methods,
                             'reject' to refuse services that expose any
        """
        if variadic_policy not in VARIADIC_POLICIES:
            raise ConfigError(
                f"Invalid variadic policy: {variadic_policy!r} "
                f"(expected one of {', '.join(VARIADIC_POLICIES)})"
            )

        self.variadic_policy = variadic_policy
        self._lock = threading.RLock()
        self._services: Dict[str, ServiceData] = {}

    def register(self, service_name: str, instance: Any) -> ServiceData:
        """
        Register an object under a service name.

        Args:
            service_name: Name used to address the service
            instance: Instance of a user-defined class

        Returns:
            The stored ServiceData

        Raises:
            InvalidServiceTypeError: If instance is not a user-class instance
            VariadicMethodError: If the policy is 'reject' and a public
                                 method is variadic
        """
        if not is_service_instance(instance):
            raise InvalidServiceTypeError(service_name, instance)

        methods = capture_signatures(instance)

        if self.variadic_policy == VARIADIC_REJECT:
            for method_name in sorted(methods):
                if methods[method_name].is_variadic:
                    raise VariadicMethodError(service_name, method_name)

        service = ServiceData(service_name, instance, methods)

        with self._lock:
            self._services[service_name] = service

        return service

    def unregister(self, service_name: str) -> None:
        """Remove a service. Raises NonExistentServiceError if unknown."""
        with self._lock:
            if service_name not in self._services:
                raise NonExistentServiceError(service_name)
            del self._services[service_name]

    def get_service(self, service_name: str) -> ServiceData:
        """Return a registered service with its methods"""
        with self._lock:
            service = self._services.get(service_name)

        if service is None:
            raise NonExistentServiceError(service_name)
        return service

    def get_method(self, service_name: str, method_name: str) -> MethodSignature:
        """
        Return the signature of a service method.

        Raises:
            NonExistentServiceError: If the service is not registered
            NonExistentMethodError: If the method is absent or not public
        """
        return self.resolve(service_name, method_name)[1]

    def resolve(self, service_name: str, method_name: str) -> Tuple[ServiceData, MethodSignature]:
        """Return the service and the method signature from a single lookup"""
        service = self.get_service(service_name)

        signature = service.methods.get(method_name)
        if signature is None:
            raise NonExistentMethodError(service_name, method_name)
        return service, signature

    def has_service(self, service_name: str) -> bool:
        with self._lock:
            return service_name in self._services

    def list_services(self) -> List[str]:
        """Registered service names, sorted"""
        with self._lock:
            return sorted(self._services)

    def list_methods(self, service_name: str) -> List[str]:
        """Public method names of a service, sorted"""
        return sorted(self.get_service(service_name).methods)

    def __contains__(self, service_name: object) -> bool:
        with self._lock:
            return service_name in self._services

    def __len__(self) -> int:
        with self._lock:
            return len(self._services)


def is_service_instance(instance: Any) -> bool:
    """
    Check whether an object can be registered as a service.

    Classes, modules, functions and plain values are refused: None,
    numbers, strings, bytes and containers, including their subclasses
    (Fraction, Decimal, OrderedDict, namedtuples).
    """
    if instance is None:
        return False
    if inspect.isclass(instance) or inspect.ismodule(instance) or inspect.isroutine(instance):
        return False
    if isinstance(instance, _VALUE_TYPES):
        return False
    return type(instance).__module__ != 'builtins'
