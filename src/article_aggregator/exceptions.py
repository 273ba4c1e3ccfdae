# src/article_aggregator/exceptions.py
"""
Error taxonomy of the aggregator

ProviderError subclasses are contained at the adapter boundary.
StoreUnavailableError is fatal and reaches the caller unchanged.
InvalidFilterError is raised before any provider or store call.
"""

from typing import Any, Dict, List, Optional


class NewsAggregatorError(Exception):
    """Base class for all aggregator errors"""


class ProviderError(NewsAggregatorError):
    """A single provider call failed"""

    def __init__(self, source: Any, message: str):
        self.source = source
        self.message = message
        label = getattr(source, "value", source)
        super().__init__(f"[{label}] {message}")


class ProviderUnavailableError(ProviderError):
    """Network failure, timeout, non-2xx status or provider-reported error"""


class ProviderMalformedResponseError(ProviderError):
    """Payload is not JSON or does not have the expected top-level shape"""


class StoreUnavailableError(NewsAggregatorError):
    """The article store could not be read or written"""


class InvalidFilterError(NewsAggregatorError):
    """Caller-supplied filter failed validation"""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        self.errors = errors or []
        super().__init__(message)
