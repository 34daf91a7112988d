"""
data_engine — Read access to stored market history.

Public API
----------
    from data_engine import HistoryProvider, SupabaseHistoryProvider
"""

from data_engine.history import HistoryProvider, SupabaseHistoryProvider

__all__ = ["HistoryProvider", "SupabaseHistoryProvider"]
