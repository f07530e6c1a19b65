from __future__ import annotations

import csv
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone, tzinfo
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from .api import Between
from .models import Transaction, TransactionStatus

ZERO = Decimal("0")


@dataclass
class DailyRow:
    day: date
    transactions: int = 0
    liters: Decimal = ZERO
    revenue: Decimal = ZERO


@dataclass
class ReportSummary:
    start: Optional[datetime]
    end: Optional[datetime]
    transactions: int = 0
    completed: int = 0
    revenue: Decimal = ZERO
    liters: Decimal = ZERO
    by_status: Dict[str, int] = field(default_factory=dict)
    by_payment_method: Dict[str, int] = field(default_factory=dict)
    revenue_by_fuel_type: Dict[str, Decimal] = field(default_factory=dict)
    daily: List[DailyRow] = field(default_factory=list)

    @property
    def average_sale(self) -> Decimal:
        if not self.completed:
            return ZERO
        return (self.revenue / self.completed).quantize(Decimal("0.01"))

    def top_fuel_type(self) -> Tuple[str, Decimal]:
        if not self.revenue_by_fuel_type:
            return "—", ZERO
        return max(self.revenue_by_fuel_type.items(), key=lambda item: item[1])


def report_period(start: date, end: date, zone: Optional[tzinfo] = None) -> Between:
    """Whole days from ``start`` to ``end`` in ``zone`` (local time by default)."""
    if end < start:
        start, end = end, start
    zone = zone or datetime.now().astimezone().tzinfo or timezone.utc
    return Between(
        datetime.combine(start, time.min, tzinfo=zone),
        datetime.combine(end, time.max, tzinfo=zone),
    )


def _in_period(tx: Transaction, start: Optional[datetime], end: Optional[datetime]) -> bool:
    if start is None and end is None:
        return True
    if tx.created_at is None:
        return False
    if start and tx.created_at < start:
        return False
    if end and tx.created_at > end:
        return False
    return True


def build_report(
    transactions: Iterable[Transaction],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> ReportSummary:
    """Aggregate a transaction snapshot. Revenue and liters count completed sales only."""
    summary = ReportSummary(start=start, end=end)
    by_status: Dict[str, int] = defaultdict(int)
    by_method: Dict[str, int] = defaultdict(int)
    by_fuel: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    days: Dict[date, DailyRow] = {}

    for tx in transactions:
        if not _in_period(tx, start, end):
            continue
        summary.transactions += 1
        by_status[tx.status_value] += 1
        by_method[tx.payment_method_value] += 1
        if tx.status_value != TransactionStatus.COMPLETED.value:
            continue
        summary.completed += 1
        summary.revenue += tx.total_amount
        summary.liters += tx.fuel_amount
        by_fuel[tx.fuel_type_name or "Unknown"] += tx.total_amount
        if tx.created_at is not None:
            day = tx.created_at.date()
            row = days.setdefault(day, DailyRow(day))
            row.transactions += 1
            row.liters += tx.fuel_amount
            row.revenue += tx.total_amount

    summary.by_status = dict(by_status)
    summary.by_payment_method = dict(by_method)
    summary.revenue_by_fuel_type = dict(by_fuel)
    summary.daily = sorted(days.values(), key=lambda row: row.day, reverse=True)
    return summary


def export_report_csv(file_path: str, summary: ReportSummary, *, title: str = "FuelStation report") -> None:
    with open(file_path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle, delimiter=";")
        writer.writerow([title])
        start = summary.start.strftime("%d.%m.%Y %H:%M") if summary.start else "—"
        end = summary.end.strftime("%d.%m.%Y %H:%M") if summary.end else "—"
        writer.writerow([f"Period: {start} – {end}"])
        writer.writerow([])
        writer.writerow(["Totals"])
        writer.writerow(["Transactions", summary.transactions])
        writer.writerow(["Completed", summary.completed])
        writer.writerow(["Revenue", f"{summary.revenue:.2f}"])
        writer.writerow(["Liters sold", f"{summary.liters:.2f}"])
        writer.writerow(["Average sale", f"{summary.average_sale:.2f}"])
        writer.writerow([])
        writer.writerow(["By status"])
        writer.writerow(["Status", "Count"])
        for status, count in sorted(summary.by_status.items(), key=lambda item: item[1], reverse=True):
            writer.writerow([status, count])
        writer.writerow([])
        writer.writerow(["By payment method"])
        writer.writerow(["Method", "Count"])
        for method, count in sorted(summary.by_payment_method.items(), key=lambda item: item[1], reverse=True):
            writer.writerow([method, count])
        writer.writerow([])
        writer.writerow(["Revenue by fuel type"])
        writer.writerow(["Fuel type", "Revenue"])
        if summary.revenue_by_fuel_type:
            for name, revenue in sorted(summary.revenue_by_fuel_type.items(), key=lambda item: item[1], reverse=True):
                writer.writerow([name, f"{revenue:.2f}"])
        else:
            writer.writerow(["No data", "—"])
        writer.writerow([])
        writer.writerow(["Daily activity"])
        writer.writerow(["Date", "Transactions", "Liters", "Revenue"])
        if summary.daily:
            for row in summary.daily:
                writer.writerow([row.day.strftime("%d.%m.%Y"), row.transactions, f"{row.liters:.2f}", f"{row.revenue:.2f}"])
        else:
            writer.writerow(["No data", "—", "—", "—"])


def _amount(value: Optional[Decimal]) -> str:
    return f"{value:.2f}" if value is not None else ""


def export_transactions_csv(file_path: str, transactions: Iterable[Transaction]) -> int:
    """Write one row per transaction; returns the number of rows written."""
    count = 0
    with open(file_path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle, delimiter=";")
        writer.writerow(
            ["Date", "Receipt", "Fuel type", "Liters", "Price per liter", "Total", "Payment", "Status", "Employee"]
        )
        for tx in transactions:
            writer.writerow(
                [
                    tx.created_at.strftime("%d.%m.%Y %H:%M") if tx.created_at else "",
                    tx.receipt_number or "",
                    tx.fuel_type_name or "",
                    _amount(tx.fuel_amount),
                    _amount(tx.fuel_price_per_liter),
                    _amount(tx.total_amount),
                    tx.payment_method_value,
                    tx.status_value,
                    tx.employee_name or "",
                ]
            )
            count += 1
    return count
