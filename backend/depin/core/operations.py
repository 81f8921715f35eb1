"""
Instrumentation for ledger operations
"""
from functools import wraps

from depin.core.errors import LedgerError
from depin.core.logging_config import LoggingConfig
from depin.core.metrics import operations_rejected_total

logger = LoggingConfig.get_logger(__name__)


def ledger_operation(operation: str):
    """
    Decorator factory recording rejected ledger operations

    Counts and logs every LedgerError raised by the wrapped method, then
    re-raises it unchanged.

    Usage:
        @ledger_operation(Operation.SUBMIT_DATA)
        def submit_data(self, caller, device_key, quality):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except LedgerError as e:
                operations_rejected_total.labels(operation=operation, code=e.code).inc()
                logger.warning(
                    f"{operation} rejected: {e.message}",
                    extra={"operation": operation, "error_code": e.code, **e.metadata},
                )
                raise
        return wrapper
    return decorator
