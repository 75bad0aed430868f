"""Analytics export — JSON reports and CSV category tables.

Usage::

    exporter = AnalyticsExporter()
    json_str = exporter.to_json(view)
    csv_str = exporter.categories_to_csv(view.categories, "setup")
    rows_csv = exporter.monthly_to_csv(view.monthly)
"""

from __future__ import annotations

import csv
import io
import json
import logging
from typing import Any

from trade_analytics.core.errors import AnalyticsError

from .categories import CategoryBreakdown, CategoryStat
from .engine import AnalyticsView
from .monthly import MONTH_NAMES, MonthlyResult

logger = logging.getLogger(__name__)

_CATEGORY_COLUMNS = [
    "label",
    "total",
    "wins",
    "losses",
    "be_wins",
    "be_losses",
    "break_even",
    "win_rate",
    "win_rate_with_be",
]

_MONTHLY_COLUMNS = [
    "month",
    "total_trades",
    "wins",
    "losses",
    "be_wins",
    "be_losses",
    "profit",
    "win_rate",
    "win_rate_with_be",
]


class AnalyticsExporter:
    """Serialize analytics views for external consumers.

    Parameters
    ----------
    indent : int
        JSON indentation level.  Default 2.
    """

    def __init__(self, *, indent: int = 2) -> None:
        self._indent = indent

    # ------------------------------------------------------------------ #
    # JSON Export                                                          #
    # ------------------------------------------------------------------ #

    def to_json(self, view: AnalyticsView, *, include_trades: bool = False) -> str:
        """Export a full view as a JSON string.

        Parameters
        ----------
        view : AnalyticsView
            Result of :meth:`AnalyticsEngine.compute`.
        include_trades : bool
            Also embed the filtered trades the view was computed from.
        """
        doc = view.to_dict()
        if include_trades:
            doc["trades"] = [t.to_dict() for t in view.trades]
        return json.dumps(doc, indent=self._indent, default=str)

    def section_to_json(self, view: AnalyticsView, section: str) -> str:
        """Export one statistic set (``"scalar"``, ``"monthly"``, ...)."""
        doc = view.to_dict()
        if section not in doc or isinstance(doc[section], (str, int, float)):
            raise AnalyticsError(f"Unknown report section: {section!r}")
        return json.dumps(
            {"request_id": view.request_id, section: doc[section]},
            indent=self._indent,
            default=str,
        )

    def dimension_to_json(self, breakdown: CategoryBreakdown, dimension: str) -> str:
        """One category dimension as ``{dimension: [stat, ...]}``."""
        stats = self._dimension(breakdown, dimension)
        return json.dumps(
            {dimension: [s.to_dict() for s in stats]}, indent=self._indent, default=str
        )

    # ------------------------------------------------------------------ #
    # CSV Export                                                           #
    # ------------------------------------------------------------------ #

    def categories_to_csv(self, breakdown: CategoryBreakdown, dimension: str) -> str:
        """One category dimension as CSV with a header row.

        Raises
        ------
        AnalyticsError
            If ``dimension`` is not a known category dimension.
        """
        stats = self._dimension(breakdown, dimension)
        return self._write_csv(_CATEGORY_COLUMNS, (s.to_dict() for s in stats))

    def monthly_to_csv(self, result: MonthlyResult) -> str:
        """Months with trades, in calendar order."""
        rows: list[dict[str, Any]] = []
        for name in MONTH_NAMES:
            stats = result.monthly_data.get(name)
            if stats is not None:
                rows.append({"month": name, **stats.to_dict()})
        return self._write_csv(_MONTHLY_COLUMNS, rows)

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _dimension(breakdown: CategoryBreakdown, dimension: str) -> tuple[CategoryStat, ...]:
        dimensions = breakdown.dimensions()
        if dimension not in dimensions:
            raise AnalyticsError(
                f"Unknown category dimension {dimension!r}; "
                f"expected one of {', '.join(dimensions)}"
            )
        return dimensions[dimension]

    @staticmethod
    def _write_csv(columns: list[str], rows) -> str:
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        count = 0
        for row in rows:
            writer.writerow({c: row.get(c, "") for c in columns})
            count += 1
        logger.debug("Wrote %d CSV rows", count)
        return buf.getvalue()
