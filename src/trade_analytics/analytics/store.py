"""Trade store — read-only source of trade records.

The engine never reaches into storage itself; callers hand it whatever a
:class:`TradeStore` returns.  Two implementations ship here:

InMemoryTradeStore   list-backed, for tests and embedding
JsonTradeStore       JSON document or JSON-Lines file, used by the CLI
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from datetime import date
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from trade_analytics.core.errors import TradeStoreError, TradeValidationError

from .filters import matches_date_range
from .record import Trade

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

@runtime_checkable
class TradeStore(Protocol):
    """Ordered, read-only collection of trades for an account."""

    def load(
        self,
        account_id: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[Trade]:
        """Trades for ``account_id`` within the inclusive date window.

        ``None`` arguments do not restrict.  Input order is preserved.
        """
        ...


def _select(
    trades: Iterable[Trade],
    account_id: str | None,
    date_from: date | None,
    date_to: date | None,
) -> list[Trade]:
    return [
        t for t in trades
        if (account_id is None or t.account_id == account_id)
        and matches_date_range(t, date_from, date_to)
    ]


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------

class InMemoryTradeStore:
    """List-backed store.  Rows may be :class:`Trade` or raw mappings."""

    def __init__(self, trades: Iterable[Trade | Mapping[str, Any]] = ()) -> None:
        self._trades: list[Trade] = [
            t if isinstance(t, Trade) else Trade.from_mapping(t) for t in trades
        ]

    def __len__(self) -> int:
        return len(self._trades)

    def add(self, trade: Trade) -> None:
        self._trades.append(trade)

    def load(
        self,
        account_id: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[Trade]:
        return _select(self._trades, account_id, date_from, date_to)


# ---------------------------------------------------------------------------
# JSON file implementation
# ---------------------------------------------------------------------------

class JsonTradeStore:
    """Trades from a JSON file.

    Accepted layouts:

    * a JSON array of trade objects
    * an object ``{"trades": [...], "account_balance": 10000}``
    * JSON Lines (``.jsonl``), one trade object per line

    The file is read lazily on first access and cached.  Unreadable or
    malformed files raise :class:`TradeStoreError`.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._trades: list[Trade] | None = None
        self._account_balance: float | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def account_balance(self) -> float | None:
        """Balance stored alongside the trades, if the file has one."""
        self._ensure_loaded()
        return self._account_balance

    def load(
        self,
        account_id: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[Trade]:
        return _select(self._ensure_loaded(), account_id, date_from, date_to)

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _ensure_loaded(self) -> list[Trade]:
        if self._trades is None:
            rows = self._read_rows()
            try:
                self._trades = [Trade.from_mapping(r) for r in rows]
            except TradeValidationError as exc:
                raise TradeStoreError(f"{self._path}: {exc}") from exc
            logger.debug("Loaded %d trades from %s", len(self._trades), self._path)
        return self._trades

    def _read_rows(self) -> list[Any]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise TradeStoreError(f"Cannot read trade file {self._path}: {exc}") from exc

        if self._path.suffix == ".jsonl":
            return self._parse_lines(text)

        try:
            doc = json.loads(text)
        except json.JSONDecodeError as exc:
            raise TradeStoreError(f"Invalid JSON in {self._path}: {exc}") from exc

        if isinstance(doc, list):
            return doc
        if isinstance(doc, dict) and isinstance(doc.get("trades"), list):
            balance = doc.get("account_balance")
            if balance is not None:
                try:
                    self._account_balance = float(balance)
                except (TypeError, ValueError) as exc:
                    raise TradeStoreError(
                        f"Invalid account_balance {balance!r} in {self._path}"
                    ) from exc
            return doc["trades"]
        raise TradeStoreError(
            f"{self._path}: expected a list of trades or an object with a 'trades' list"
        )

    def _parse_lines(self, text: str) -> list[Any]:
        rows = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line:
                continue
            try:
                rows.append(json.loads(line))
            except json.JSONDecodeError as exc:
                raise TradeStoreError(
                    f"Invalid JSON on line {lineno} of {self._path}: {exc}"
                ) from exc
        return rows
