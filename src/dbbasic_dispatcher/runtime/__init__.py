"""
Runtime execution for registered services.

- invoker: argument checks and the call itself
- coercion: loosely-typed input -> declared parameter types
- dispatcher: the integrated Dispatcher
"""

from .coercion import validate_param
from .dispatcher import Dispatcher
from .invoker import run_method

__all__ = [
    "Dispatcher",
    "run_method",
    "validate_param",
]
