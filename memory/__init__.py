"""
Memory module initialization.

Provides the read-only analytics store used by the tools and the
conversation store that persists assistant threads.
"""

from memory.analytics_store import AnalyticsStore
from memory.assistant_store import AssistantStore, Exchange, PersistedExchange
from memory.unit_of_work import UnitOfWork

__all__ = [
    "AnalyticsStore",
    "AssistantStore",
    "Exchange",
    "PersistedExchange",
    "UnitOfWork",
]
