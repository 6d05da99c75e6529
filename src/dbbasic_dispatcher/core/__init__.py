"""
Core primitives of the dispatcher.

- errors: the exception hierarchy
- signature: MethodSignature and signature capture
- registry: ServiceRegistry, the name -> service map
- call_logger: per-service TSV call logs

Everything in runtime builds on these.
"""

from .errors import DispatcherError
from .registry import ServiceData, ServiceRegistry
from .signature import MethodSignature, capture_signatures

__all__ = [
    "DispatcherError",
    "ServiceData",
    "ServiceRegistry",
    "MethodSignature",
    "capture_signatures",
]
