"""
Operation Context
=================

Tags every log line emitted during one aggregator operation (a full refresh
or a search) with a short operation ID. contextvars are copied into the tasks
spawned by asyncio.gather, so the ID follows the provider fan-out.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

_operation_id_var: ContextVar[Optional[str]] = ContextVar("operation_id", default=None)


def generate_operation_id(prefix: str = "op") -> str:
    """Generate an ID like "fetch-a1b2c3d4"."""
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def get_operation_id() -> Optional[str]:
    """Get the current operation ID from context."""
    return _operation_id_var.get()


class OperationContext:
    """
    Context manager for operation ID scoping.

    Usage:
        async with OperationContext(prefix="fetch"):
            await aggregator.fetch_all()
    """

    def __init__(self, operation_id: Optional[str] = None, prefix: str = "op"):
        self.operation_id = operation_id or generate_operation_id(prefix)
        self._token = None

    def __enter__(self):
        self._token = _operation_id_var.set(self.operation_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _operation_id_var.reset(self._token)
        return False

    async def __aenter__(self):
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return self.__exit__(exc_type, exc_val, exc_tb)
