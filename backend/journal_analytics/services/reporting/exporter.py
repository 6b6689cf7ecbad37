"""
Exporter Service

This module exports daily analytics snapshots in CSV or Excel format with the
following columns:
  1. Date           - Day of the snapshot (YYYY-MM-DD)
  2. Total Trades   - Closed trades of the day
  3. Winning Trades
  4. Losing Trades
  5. Gross P&L
  6. Net P&L
  7. Charges
  8. Win Rate       - Percentage, 2 dp
  9. Profit Factor  - 999.99 when the day had wins and no losses

It also builds an equity-curve DataFrame (cumulative P&L, running peak and
drawdown) from a daily P&L series for charting or export.
"""

import csv
import io
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import pandas as pd

from journal_analytics.core.config import analytics_constants
from journal_analytics.core.enums import ExportFormat, PeriodType
from journal_analytics.core.errors.base import ValidationError
from journal_analytics.core.errors.decorators import error_handler
from journal_analytics.core.logging.logger import get_logger
from journal_analytics.models.analytics import AnalyticsSnapshot, DailyPnLEntry

logger = get_logger(__name__)

DAILY_COLUMNS = [
    "Date",
    "Total Trades",
    "Winning Trades",
    "Losing Trades",
    "Gross P&L",
    "Net P&L",
    "Charges",
    "Win Rate",
    "Profit Factor",
]

EQUITY_CURVE_COLUMNS = ["date", "pnl", "cumulative_pnl", "peak", "drawdown"]


def _parse_format(export_format: Union[str, ExportFormat]) -> ExportFormat:
    try:
        return ExportFormat(str(getattr(export_format, "value", export_format)).lower())
    except ValueError:
        raise ValidationError(
            f"Unsupported export format: {export_format}",
            context={"export_format": str(export_format), "valid_formats": [f.value for f in ExportFormat]},
        )


class Exporter:
    """
    Writes daily snapshot tables and equity curves to CSV or Excel.
    """

    def __init__(self) -> None:
        self.logger = logger

    @staticmethod
    def daily_rows(snapshots: Sequence[AnalyticsSnapshot]) -> List[Dict[str, Any]]:
        """Rows for the daily table, ascending by date; non-daily snapshots are ignored."""
        daily = sorted(
            (s for s in snapshots if s.period_type == PeriodType.DAY),
            key=lambda s: s.scope.date,
        )
        return [
            {
                "Date": s.scope.date.strftime(analytics_constants.DATE_FORMAT),
                "Total Trades": s.aggregate.total_trades,
                "Winning Trades": s.aggregate.winning_trades,
                "Losing Trades": s.aggregate.losing_trades,
                "Gross P&L": s.aggregate.gross_pnl,
                "Net P&L": s.aggregate.net_pnl,
                "Charges": s.aggregate.total_charges,
                "Win Rate": s.aggregate.win_rate,
                "Profit Factor": s.aggregate.profit_factor,
            }
            for s in daily
        ]

    def daily_csv(self, snapshots: Sequence[AnalyticsSnapshot]) -> str:
        """Daily table rendered as CSV text."""
        buffer = io.StringIO()
        self._write_csv(self.daily_rows(snapshots), DAILY_COLUMNS, buffer)
        return buffer.getvalue()

    @error_handler(
        context_extractor=lambda self, snapshots, output_file, export_format="csv": {
            "output_file": str(output_file),
            "export_format": str(export_format),
            "snapshot_count": len(snapshots),
        },
        log_message="Failed to export daily snapshots"
    )
    def export_daily_snapshots(
        self,
        snapshots: Sequence[AnalyticsSnapshot],
        output_file: Union[str, Path],
        export_format: Union[str, ExportFormat] = ExportFormat.CSV,
    ) -> int:
        """
        Export daily snapshots to a file.

        Args:
            snapshots: Snapshots to export; only daily ones are written.
            output_file: Destination path.
            export_format: "csv" or "excel".

        Returns:
            Number of rows written.

        Raises:
            ValidationError: If the export format is not supported.
        """
        fmt = _parse_format(export_format)
        rows = self.daily_rows(snapshots)
        if not rows:
            self.logger.info("No daily snapshots found for export", extra={"output_file": str(output_file)})

        if fmt == ExportFormat.CSV:
            with open(output_file, mode="w", newline="", encoding="utf-8") as csvfile:
                self._write_csv(rows, DAILY_COLUMNS, csvfile)
        else:
            pd.DataFrame(rows, columns=DAILY_COLUMNS).to_excel(output_file, index=False)

        self.logger.info(
            "Export completed",
            extra={"output_file": str(output_file), "format": fmt.value, "row_count": len(rows)}
        )
        return len(rows)

    @staticmethod
    def _write_csv(rows: List[Dict[str, Any]], fieldnames: List[str], stream: Any) -> None:
        writer = csv.DictWriter(stream, fieldnames=fieldnames, lineterminator="\n")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

    @staticmethod
    def equity_curve_frame(daily_pnl: Sequence[DailyPnLEntry]) -> pd.DataFrame:
        """
        Equity curve of a daily P&L series.

        The running peak starts from a zero baseline, matching the drawdown
        scan, so an opening loss already shows as drawdown.
        """
        if not daily_pnl:
            return pd.DataFrame(columns=EQUITY_CURVE_COLUMNS)

        df = pd.DataFrame(
            {
                "date": [entry.date for entry in daily_pnl],
                "pnl": [float(entry.pnl) for entry in daily_pnl],
            }
        )
        df["cumulative_pnl"] = df["pnl"].cumsum().round(2)
        df["peak"] = df["cumulative_pnl"].cummax().clip(lower=0)
        df["drawdown"] = (df["peak"] - df["cumulative_pnl"]).round(2)
        return df[EQUITY_CURVE_COLUMNS]

    @error_handler(
        context_extractor=lambda self, daily_pnl, output_file, export_format="csv": {
            "output_file": str(output_file),
            "export_format": str(export_format),
            "days": len(daily_pnl),
        },
        log_message="Failed to export equity curve"
    )
    def export_equity_curve(
        self,
        daily_pnl: Sequence[DailyPnLEntry],
        output_file: Union[str, Path],
        export_format: Union[str, ExportFormat] = ExportFormat.CSV,
    ) -> int:
        fmt = _parse_format(export_format)
        df = self.equity_curve_frame(daily_pnl)
        if fmt == ExportFormat.CSV:
            df.to_csv(output_file, index=False)
        else:
            df.to_excel(output_file, index=False)
        self.logger.info(
            "Equity curve exported",
            extra={"output_file": str(output_file), "format": fmt.value, "row_count": len(df)}
        )
        return len(df)
