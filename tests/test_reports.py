from datetime import date, datetime, timezone
from decimal import Decimal

from conftest import FakeClient, TRANSACTION_ROWS

from fuelstation.models import Transaction
from fuelstation.reports import build_report, export_report_csv, export_transactions_csv, report_period
from fuelstation.tables import TRANSACTIONS as TRANSACTIONS_TABLE
from fuelstation.viewmodels import ListViewModel

TRANSACTIONS = [Transaction.from_row(row) for row in TRANSACTION_ROWS]


def test_revenue_counts_completed_sales_only():
    summary = build_report(TRANSACTIONS)

    assert summary.transactions == 4
    assert summary.completed == 2
    assert summary.revenue == Decimal("1420.0") + Decimal("300.0")
    assert summary.liters == Decimal("50")
    assert summary.by_status == {"completed": 2, "pending": 1, "failed": 1}
    assert summary.by_payment_method == {"cash": 2, "qr_code": 1, "credit_card": 1}
    assert summary.revenue_by_fuel_type == {"Gasohol 95": Decimal("1420.0"), "Diesel": Decimal("300.0")}
    assert summary.top_fuel_type() == ("Gasohol 95", Decimal("1420.0"))
    assert summary.average_sale == Decimal("860.00")


def test_period_filter_is_inclusive():
    start = datetime(2024, 3, 1, tzinfo=timezone.utc)
    end = datetime(2024, 3, 2, 9, 0, tzinfo=timezone.utc)
    summary = build_report(TRANSACTIONS, start, end)

    assert summary.transactions == 2
    assert summary.completed == 1
    assert [row.day.isoformat() for row in summary.daily] == ["2024-03-01"]


def test_daily_rows_are_newest_first():
    summary = build_report(TRANSACTIONS)
    assert [row.day.isoformat() for row in summary.daily] == ["2024-03-03", "2024-03-01"]


def test_empty_report():
    summary = build_report([])
    assert summary.revenue == Decimal("0")
    assert summary.average_sale == Decimal("0")
    assert summary.top_fuel_type() == ("—", Decimal("0"))


def test_export_writes_semicolon_csv(tmp_path):
    path = tmp_path / "report.csv"
    export_report_csv(str(path), build_report(TRANSACTIONS), title="Main St report")

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Main St report"
    assert "Revenue;1720.00" in lines
    assert "Gasohol 95;1420.00" in lines
    assert "03.03.2024;1;40.00;1420.00" in lines


def test_report_period_covers_whole_days():
    period = report_period(date(2024, 3, 2), date(2024, 3, 1), timezone.utc)

    assert period.low == datetime(2024, 3, 1, 0, 0, tzinfo=timezone.utc)
    assert period.high.date() == date(2024, 3, 2)
    assert period.high.hour == 23 and period.high.minute == 59


def test_older_period_is_requested_from_the_server():
    client = FakeClient(TRANSACTION_ROWS)
    view = ListViewModel(client, TRANSACTIONS_TABLE.with_limit(1000))
    period = report_period(date(2024, 2, 28), date(2024, 2, 29), timezone.utc)

    view.set_filter("created_at", period)
    view.refresh()

    op, filters, order, limit = client.calls[0]
    assert op == "list"
    assert filters == {"created_at": period}
    assert limit == 1000
    assert [tx.id for tx in view.snapshot] == ["tx-4"]

    summary = build_report(view.visible_items(), period.low, period.high)
    assert summary.transactions == 1
    assert summary.by_status == {"failed": 1}


def test_changing_the_period_refetches_only_that_range():
    client = FakeClient(TRANSACTION_ROWS)
    view = ListViewModel(client, TRANSACTIONS_TABLE)
    view.set_filter("created_at", report_period(date(2024, 3, 3), date(2024, 3, 3), timezone.utc))
    view.refresh()
    view.set_filter("created_at", report_period(date(2024, 3, 1), date(2024, 3, 2), timezone.utc))
    view.refresh()

    assert client.count("list") == 2
    assert sorted(tx.id for tx in view.visible_items()) == ["tx-2", "tx-3"]


def test_transactions_export_writes_one_row_per_transaction(tmp_path):
    path = tmp_path / "transactions.csv"
    count = export_transactions_csv(str(path), iter(TRANSACTIONS))

    lines = path.read_text(encoding="utf-8").splitlines()
    assert count == 4
    assert len(lines) == 5
    assert lines[0].startswith("Date;Receipt;Fuel type")
    assert lines[1] == "03.03.2024 09:00;R-1001;Gasohol 95;40.00;35.50;1420.00;cash;completed;Jane Doe"
    assert lines[4].split(";")[1] == ""
