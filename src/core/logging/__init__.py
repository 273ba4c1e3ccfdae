"""
Logging System
==============

- Category-based log files (app, provider, store, error)
- Daily rotation with 15-day retention
- Operation ID tracing via contextvars (one ID per refresh or search)
- JSON format for production, colored text for development
- Automatic ERROR/CRITICAL mirroring to the error/ directory

Usage:
------
```python
from src.core.logging import setup_logging, get_logger, OperationContext

setup_logging()

logger = get_logger("src.article_aggregator.providers.guardian_provider")  # logs/provider/
logger = get_logger()                                                       # logs/app/

with OperationContext(prefix="search"):
    logger.info("Falling back to live search")  # includes [search-1a2b3c4d]
```

Directory Structure:
-------------------
logs/
├── app/         # Aggregator and job logs
├── provider/    # Adapter calls, payload problems
├── store/       # Article store
└── error/       # ERROR + CRITICAL only
"""

from src.core.logging.config import setup_logging, get_logger, shutdown_logging
from src.core.logging.context import (
    OperationContext,
    get_operation_id,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "shutdown_logging",
    "OperationContext",
    "get_operation_id",
]
