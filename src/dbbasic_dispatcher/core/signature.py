"""
Signature Capture

Inspects a service object's public methods and records, per method, what
the invoker needs to validate a call before making it.

A signature holds:
- The ordered parameter type list, receiver type first
- The total parameter count (receiver included)
- Whether the last parameter is variadic (*args)
- The underlying function and its return annotation

Types come from annotations. Unannotated parameters are recorded as Any.
Keyword-only parameters and **kwargs are not part of the positional
signature. Static methods and properties have no receiver and are not
captured.
"""

import inspect
import typing
from typing import Any, Callable, Dict, Optional, Tuple


_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class MethodSignature:
    """
    Captured signature of one service method.

    Immutable once built. Index 0 of args_types is always the receiver
    type; when is_variadic is set, the last entry is the element type of
    the *args parameter.
    """

    __slots__ = (
        '_name',
        '_function',
        '_args_types',
        '_is_variadic',
        '_binds_class',
        '_return_type',
        '_parameter_names',
    )

    def __init__(
        self,
        name: str,
        function: Callable,
        args_types: Tuple[Any, ...],
        is_variadic: bool = False,
        binds_class: bool = False,
        return_type: Any = Any,
        parameter_names: Tuple[str, ...] = (),
    ):
        self._name = name
        self._function = function
        self._args_types = tuple(args_types)
        self._is_variadic = is_variadic
        self._binds_class = binds_class
        self._return_type = return_type
        self._parameter_names = tuple(parameter_names)

    @property
    def name(self) -> str:
        return self._name

    @property
    def function(self) -> Callable:
        """The unbound function; call it with the receiver first"""
        return self._function

    @property
    def args_count(self) -> int:
        """Total parameter count, receiver and variadic slot included"""
        return len(self._args_types)

    @property
    def args_types(self) -> Tuple[Any, ...]:
        return self._args_types

    @property
    def is_variadic(self) -> bool:
        return self._is_variadic

    @property
    def binds_class(self) -> bool:
        """True for classmethods, whose receiver is the class itself"""
        return self._binds_class

    @property
    def return_type(self) -> Any:
        return self._return_type

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        """Parameter names, receiver excluded"""
        return self._parameter_names

    @property
    def receiver_type(self) -> type:
        return self._args_types[0]

    @property
    def parameter_types(self) -> Tuple[Any, ...]:
        """Declared parameter types, receiver excluded"""
        return self._args_types[1:]

    @property
    def fixed_count(self) -> int:
        """Number of non-variadic parameters, receiver excluded"""
        return self.args_count - 1 - (1 if self._is_variadic else 0)

    @property
    def fixed_types(self) -> Tuple[Any, ...]:
        return self._args_types[1:1 + self.fixed_count]

    @property
    def variadic_type(self) -> Optional[Any]:
        """Element type of the variadic parameter, or None"""
        if not self._is_variadic:
            return None
        return self._args_types[-1]

    def __repr__(self) -> str:
        params = ', '.join(_annotation_repr(t) for t in self.parameter_types)
        if self._is_variadic:
            head, _, last = params.rpartition(', ')
            params = f"{head}, *{last}" if head else f"*{last}"
        return f"<MethodSignature {self._name}({params})>"


def capture_signatures(instance: Any) -> Dict[str, MethodSignature]:
    """
    Capture the signatures of every public method of an object.

    Args:
        instance: The service object

    Returns:
        Dict mapping method name to MethodSignature
    """
    cls = type(instance)
    signatures: Dict[str, MethodSignature] = {}

    for name in dir(cls):
        # Skip non-public methods
        if name.startswith('_'):
            continue

        raw = inspect.getattr_static(cls, name)

        if isinstance(raw, staticmethod):
            continue

        if isinstance(raw, classmethod):
            signature = build_signature(name, raw.__func__, cls, binds_class=True)
        elif inspect.isfunction(raw):
            signature = build_signature(name, raw, cls)
        else:
            # Properties, plain attributes, C-level descriptors
            continue

        if signature is not None:
            signatures[name] = signature

    return signatures


def build_signature(
    name: str,
    function: Callable,
    receiver_type: type,
    binds_class: bool = False,
) -> Optional[MethodSignature]:
    """
    Build the signature of a single method.

    Returns None when the function cannot take a receiver positionally.
    """
    try:
        sig = inspect.signature(function)
    except (TypeError, ValueError):
        return None

    params = list(sig.parameters.values())
    if not params or params[0].kind not in _POSITIONAL:
        return None

    hints = _resolve_hints(function)

    args_types = [receiver_type]
    names = []
    is_variadic = False

    for param in params[1:]:
        if param.kind in _POSITIONAL:
            args_types.append(_param_type(param, hints))
            names.append(param.name)
        elif param.kind == inspect.Parameter.VAR_POSITIONAL:
            args_types.append(_param_type(param, hints))
            names.append(param.name)
            is_variadic = True
        # KEYWORD_ONLY and VAR_KEYWORD are not positional

    if 'return' in hints:
        return_type = hints['return']
    elif sig.return_annotation is inspect.Signature.empty:
        return_type = Any
    else:
        return_type = _unresolved(sig.return_annotation)

    return MethodSignature(
        name=name,
        function=function,
        args_types=tuple(args_types),
        is_variadic=is_variadic,
        binds_class=binds_class,
        return_type=return_type,
        parameter_names=tuple(names),
    )


def _resolve_hints(function: Callable) -> Dict[str, Any]:
    """Helper: evaluated annotations, empty when forward refs cannot resolve"""
    try:
        return typing.get_type_hints(function)
    except (NameError, TypeError, AttributeError):
        return {}


def _param_type(param: inspect.Parameter, hints: Dict[str, Any]) -> Any:
    """Helper: declared type of a parameter, Any when unannotated"""
    if param.name in hints:
        return hints[param.name]
    if param.annotation is inspect.Parameter.empty:
        return Any
    return _unresolved(param.annotation)


def _unresolved(annotation: Any) -> Any:
    # A string annotation that get_type_hints could not evaluate
    if isinstance(annotation, str):
        return Any
    return annotation


def _annotation_repr(tp: Any) -> str:
    if isinstance(tp, type):
        return tp.__qualname__
    return repr(tp).replace('typing.', '')
