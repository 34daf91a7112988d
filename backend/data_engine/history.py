"""
data_engine/history.py
──────────────────────
Read-only access to stored price history, the forecasting engine's only
view of the database.

``HistoryProvider`` is the boundary the orchestrator depends on; anything
with a matching ``fetch_recent`` works (tests pass in-memory stubs).
``SupabaseHistoryProvider`` reads the ``assets`` / ``historical_prices``
tables populated by the market-data sync job.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol

from core.database import get_supabase_client
from schemas.forecast import Observation

logger = logging.getLogger(__name__)


class HistoryProvider(Protocol):
    """Source of historical observations for a symbol."""

    def fetch_recent(self, symbol: str, limit: int) -> List[Observation]:
        """
        Return up to ``limit`` most recent observations, oldest → newest.

        May return fewer than ``limit`` (short history) or none at all.
        """
        ...


class SupabaseHistoryProvider:
    """
    ``HistoryProvider`` backed by the Supabase ``historical_prices`` table.

    Args:
        client: Supabase client; resolved lazily via ``get_supabase_client``
                when omitted so tests can patch it.

    Example:
        >>> provider = SupabaseHistoryProvider()
        >>> provider.fetch_recent("AAPL", limit=100)[-1].price
        188.0
    """

    def __init__(self, client: Optional[Any] = None) -> None:
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    # ── public API ────────────────────────────────────────────────────────

    def fetch_recent(self, symbol: str, limit: int) -> List[Observation]:
        """
        Fetch the newest ``limit`` price rows for ``symbol``.

        Rows are queried newest first (so ``limit`` keeps the most recent
        ones) and reversed into ascending timestamp order.

        Args:
            symbol: Ticker symbol (e.g. ``"AAPL"``).
            limit:  Maximum number of rows.

        Returns:
            Observations sorted oldest → newest; empty if the symbol is unknown.

        Raises:
            Exception: Propagates Supabase errors after logging them.
        """
        db = self.client
        try:
            asset_res = (
                db.table("assets").select("id").eq("symbol", symbol).limit(1).execute()
            )
            if not asset_res.data:
                logger.warning("Symbol %s not found in assets table", symbol)
                return []

            asset_id = asset_res.data[0]["id"]
            price_res = (
                db.table("historical_prices")
                .select("timestamp,close_price,volume")
                .eq("asset_id", asset_id)
                .order("timestamp", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception:
            logger.exception("History query failed for %s", symbol)
            raise

        rows = list(reversed(price_res.data or []))
        observations = [self._to_observation(row) for row in rows]
        logger.info("Loaded %d observations for %s", len(observations), symbol)
        return observations

    # ── private helpers ───────────────────────────────────────────────────

    @staticmethod
    def _to_observation(row: Dict[str, Any]) -> Observation:
        return Observation(
            price=float(row["close_price"]),
            volume=int(row.get("volume") or 0),
            timestamp=row["timestamp"],
        )
