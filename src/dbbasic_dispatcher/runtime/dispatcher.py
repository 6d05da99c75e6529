"""
Dispatcher

Integrates the registry, invoker, coercion and call logging behind one
object. This is what a request router (RPC server, CLI dispatcher,
plugin host) sits on top of: it decouples which method got called from
how the call arrived.

The dispatcher:
- Registers services under names
- Looks up captured method signatures
- Runs methods after checking argument count and exact types
- Converts loosely-typed input into declared types (validate)
- Logs registrations and calls per service, when a log_dir is configured
"""

from typing import Any, Dict, List, Optional, Union

from ..config import DispatcherConfig, get_config
from ..core.call_logger import CallLogger, service_log_dir
from ..core.registry import ServiceData, ServiceRegistry
from ..core.signature import MethodSignature
from .coercion import validate_param
from .invoker import check_arguments, invoke


class Dispatcher:
    """
    Name-addressed method dispatcher.

    Usage:
        dispatcher = Dispatcher()
        dispatcher.register('calc', Calculator())
        dispatcher.run('calc', 'add', 3, 4)              # [7]
        args = dispatcher.validate('calc', 'add', ['3', '4'])
        dispatcher.run('calc', 'add', *args)             # [7]
    """

    def __init__(self, config: Optional[DispatcherConfig] = None):
        """
        Initialize dispatcher.

        Args:
            config: Configuration (defaults to the global configuration)
        """
        self.config = config or get_config()
        self.registry = ServiceRegistry(variadic_policy=self.config.variadic_policy)

        # Call loggers, one per service name
        self._loggers: Dict[str, CallLogger] = {}

    def register(self, service_name: str, instance: Any) -> None:
        """
        Register a service.

        Re-registering a name replaces the previous service.

        Raises:
            InvalidServiceNameError: If call logging is on and the name
                                     cannot be a log directory
            InvalidServiceTypeError: If instance is not a user-class instance
            VariadicMethodError: If variadic methods are rejected by policy
        """
        # Check the log path before the registry changes
        if self.config.call_logging:
            service_log_dir(self.config.log_dir, service_name)

        service = self.registry.register(service_name, instance)

        logger = self._get_logger(service_name)
        if logger:
            logger.info(
                f'Registered {type(instance).__name__}',
                event='register',
                service_type=f'{type(instance).__module__}.{type(instance).__qualname__}',
                method_count=len(service.methods),
            )

    def unregister(self, service_name: str) -> None:
        """Remove a service. Its log files are kept."""
        self.registry.unregister(service_name)
        self._loggers.pop(service_name, None)

    def get_method(self, service_name: str, method_name: str) -> MethodSignature:
        """Return the captured signature of a service method"""
        return self.registry.get_method(service_name, method_name)

    def get_service(self, service_name: str) -> ServiceData:
        return self.registry.get_service(service_name)

    def has_service(self, service_name: str) -> bool:
        return self.registry.has_service(service_name)

    def list_services(self) -> List[str]:
        return self.registry.list_services()

    def list_methods(self, service_name: str) -> List[str]:
        return self.registry.list_methods(service_name)

    def run(self, service_name: str, method_name: str, *args: Any) -> List[Any]:
        """
        Run a service method.

        Args:
            service_name: Registered service name
            method_name: Public method name
            *args: Positional arguments, receiver excluded

        Returns:
            The method's results as a list

        Raises:
            NonExistentServiceError, NonExistentMethodError,
            InvalidArgumentsCountError, InvalidArgumentTypeError.
            Exceptions raised by the method itself propagate unchanged.
        """
        service, signature = self.registry.resolve(service_name, method_name)

        check_arguments(signature, args)

        logger = self._get_logger(service_name)
        if logger:
            logger.info(
                f'Running {method_name}',
                event='run',
                method=method_name,
                arg_count=len(args),
            )

        results = invoke(service, signature, args)

        if logger:
            logger.debug(
                f'{method_name} completed successfully',
                event='run',
                method=method_name,
                status='success',
                result_count=len(results),
            )

        return results

    def validate(self, service_name: str, method_name: str, param: Any) -> List[Any]:
        """
        Convert a loosely-typed param into an argument list for run().

        Raises:
            NonExistentServiceError, NonExistentMethodError,
            InvalidArgExpectedSliceError, InvalidArgumentsCountError,
            CoercionError
        """
        return validate_param(self.registry, service_name, method_name, param)

    def get_logs(
        self,
        service_name: str,
        level: Optional[Union[str, List[str]]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        **filters,
    ) -> List[Dict[str, Any]]:
        """
        Get a service's call log entries.

        Returns an empty list when call logging is disabled.
        """
        logger = self._get_logger(service_name)
        if logger is None:
            return []
        return logger.get_logs(level=level, limit=limit, offset=offset, **filters)

    def _get_logger(self, service_name: str) -> Optional[CallLogger]:
        """Helper: the service's call logger, created on first use"""
        if not self.config.call_logging:
            return None

        logger = self._loggers.get(service_name)
        if logger is None:
            logger = CallLogger(
                service_name,
                base_dir=self.config.log_dir,
                max_log_size=self.config.max_log_size,
            )
            logger = self._loggers.setdefault(service_name, logger)
        return logger
