"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorRequestError
from app.connectors.resilience import CircuitBreaker, CircuitOpenError, RetryPolicy, TTLCache
from app.connectors.world_bank_connector import WorldBankConnector
from app.connectors.wto_connector import WTOConnector

__all__ = [
    "BaseConnector",
    "CircuitBreaker",
    "CircuitOpenError",
    "ConnectorRequestError",
    "RetryPolicy",
    "TTLCache",
    "WTOConnector",
    "WorldBankConnector",
]
