from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, List, Optional, Sequence

import requests
from PySide6.QtCore import QDate, Qt
from PySide6.QtGui import QDoubleValidator
from PySide6.QtWidgets import (
    QComboBox,
    QDateEdit,
    QFileDialog,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QTableWidget,
    QTableWidgetItem,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from ..api import Between, RemoteCollectionClient
from ..config import Settings
from ..models import Employee, FuelType, Transaction, TransactionStatus
from ..notifications import NotificationSink, error_message
from ..payments import PENDING_QR, QrPaymentRequest, QrPaymentService
from ..reports import build_report, export_report_csv, export_transactions_csv, report_period
from ..runners import Runner
from ..tables import EMPLOYEES, FUEL_TYPES, TRANSACTIONS, Collection
from ..viewmodels import ALL, FormController, ListViewModel, ValidationError
from .dialogs import EmployeeDialog, FuelTypeDialog, TransactionDialog, confirm_delete
from .theme import ROLE_COLORS, STATUS_COLORS, SUCCESS_COLOR, MUTED_COLOR, TEXT_SECONDARY, WARNING_COLOR
from .widgets import FlowRow, MetricCard, PillLabel, QrCodeView, SectionTitle, danger_button, styled_button

logger = logging.getLogger(__name__)


@dataclass
class DashboardContext:
    settings: Settings
    notifier: NotificationSink
    session: requests.Session
    runner: Runner

    def client(self, collection: Collection) -> RemoteCollectionClient:
        return collection.client(self.settings, self.session)

    def money(self, value: Optional[Decimal]) -> str:
        return f"{self.settings.currency_symbol}{(value or Decimal('0')):,.2f}"


def format_date(value: Optional[datetime], fmt: str = "%d.%m.%Y") -> str:
    return value.astimezone().strftime(fmt) if value else "—"


def card() -> QFrame:
    frame = QFrame()
    frame.setObjectName("Card")
    return frame


class BasePage(QWidget):
    def __init__(self, context: DashboardContext, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.context = context
        self.runner = context.runner
        self._view_models: List[ListViewModel] = []

    def view_model(self, collection: Collection) -> ListViewModel:
        view = ListViewModel(
            self.context.client(collection),
            collection,
            runner=self.runner,
            notifier=self.context.notifier,
        )
        self._view_models.append(view)
        return view

    def form(self, view: ListViewModel) -> FormController:
        return FormController(
            view.client,
            view.collection,
            list_view=view,
            runner=self.runner,
            notifier=self.context.notifier,
        )

    def on_enter(self) -> None:
        """Hook executed whenever the page becomes visible."""

    def dispose(self) -> None:
        for view in self._view_models:
            view.dispose()


class CollectionPage(BasePage):
    """Header, search card and a table rendered from ``ListViewModel.visible_items``."""

    title = ""
    subtitle = ""
    list_title = ""
    search_placeholder = "Search..."
    empty_text = "No records found matching your search."
    columns: Sequence[str] = ()

    def __init__(self, context: DashboardContext, collection: Collection, parent: Optional[QWidget] = None) -> None:
        super().__init__(context, parent)
        self.view = self.view_model(collection)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(28, 28, 28, 28)
        layout.setSpacing(16)

        header = QHBoxLayout()
        heading = QVBoxLayout()
        heading.addWidget(SectionTitle(self.title, large=True))
        caption = QLabel(self.subtitle)
        caption.setStyleSheet(f"color: {TEXT_SECONDARY};")
        heading.addWidget(caption)
        header.addLayout(heading)
        header.addStretch(1)
        self.header_actions = QHBoxLayout()
        header.addLayout(self.header_actions)
        layout.addLayout(header)

        filters = card()
        self.filters_row = QHBoxLayout(filters)
        self.filters_row.setContentsMargins(18, 18, 18, 18)
        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText(f"🔍 {self.search_placeholder}")
        self.search_edit.textChanged.connect(self.view.set_search_text)
        self.filters_row.addWidget(self.search_edit, 1)
        layout.addWidget(filters)

        self.count_label = SectionTitle("")
        layout.addWidget(self.count_label)

        self.table = QTableWidget(0, len(self.columns), self)
        self.table.setHorizontalHeaderLabels(list(self.columns))
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.setSelectionBehavior(QTableWidget.SelectRows)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        layout.addWidget(self.table, 1)

        self.empty_label = QLabel(self.empty_text)
        self.empty_label.setAlignment(Qt.AlignCenter)
        self.empty_label.setStyleSheet(f"color: {TEXT_SECONDARY}; padding: 24px;")
        layout.addWidget(self.empty_label)

        self.view.subscribe(self.render)

    def on_enter(self) -> None:
        self.view.refresh()

    def render(self) -> None:
        items = list(self.view.visible_items())
        if self.view.is_loading and not self.view.snapshot:
            self.count_label.setText(f"Loading {self.view.collection.label.lower()}...")
        else:
            self.count_label.setText(f"{self.list_title} ({len(items)})")
        self.table.setRowCount(0)
        for item in items:
            row = self.table.rowCount()
            self.table.insertRow(row)
            self.render_row(row, item)
        self.empty_label.setVisible(not items and not self.view.is_loading)

    def render_row(self, row: int, item: Any) -> None:
        raise NotImplementedError

    def set_text(self, row: int, column: int, text: str) -> None:
        self.table.setItem(row, column, QTableWidgetItem(text))

    def set_pill(self, row: int, column: int, text: str, color: str) -> None:
        holder = QWidget()
        holder_layout = QHBoxLayout(holder)
        holder_layout.setContentsMargins(4, 2, 4, 2)
        holder_layout.addWidget(PillLabel(text, color=color))
        holder_layout.addStretch(1)
        self.table.setCellWidget(row, column, holder)

    def set_actions(self, row: int, column: int, actions: Sequence[tuple]) -> None:
        holder = FlowRow()
        for text, kind, callback in actions:
            button = danger_button(text) if kind == "danger" else styled_button(text, kind)
            button.clicked.connect(callback)
            holder.layout().addWidget(button)
        holder.layout().addStretch(1)
        self.table.setCellWidget(row, column, holder)


class TransactionsPage(CollectionPage):
    title = "Transactions"
    subtitle = "Manage fuel transactions and payments"
    list_title = "Recent Transactions"
    search_placeholder = "Search by receipt, employee, or fuel type..."
    empty_text = "No transactions found matching your criteria."
    columns = ("Date", "Fuel", "Liters", "Receipt", "Employee", "Payment", "Total", "Status")

    def __init__(self, context: DashboardContext, parent: Optional[QWidget] = None) -> None:
        super().__init__(context, TRANSACTIONS.with_limit(context.settings.transaction_limit), parent)
        self.editor = self.form(self.view)
        self.fuel_lookup = self.view_model(FUEL_TYPES.with_filters(is_active=True))
        self.employee_lookup = self.view_model(EMPLOYEES.with_filters(is_active=True))

        self.status_combo = QComboBox()
        self.status_combo.addItem("All Statuses", ALL)
        for status in TransactionStatus:
            self.status_combo.addItem(status.label, status.value)
        self.status_combo.setMinimumWidth(180)
        self.status_combo.currentIndexChanged.connect(self._status_changed)
        self.filters_row.addWidget(self.status_combo)

        export_button = styled_button("⬇ Export CSV", "outline")
        export_button.clicked.connect(self._export)
        self.filters_row.addWidget(export_button)

        new_button = styled_button("＋ New Transaction")
        new_button.clicked.connect(self._new_transaction)
        self.header_actions.addWidget(new_button)

    def on_enter(self) -> None:
        super().on_enter()
        self.fuel_lookup.refresh()
        self.employee_lookup.refresh()

    def _status_changed(self) -> None:
        self.view.set_filter("status", self.status_combo.currentData())
        self.view.refresh()

    def render_row(self, row: int, tx: Transaction) -> None:
        self.set_text(row, 0, format_date(tx.created_at))
        self.set_text(row, 1, tx.fuel_type_name or "—")
        self.set_text(row, 2, f"{tx.fuel_amount}L")
        self.set_text(row, 3, tx.receipt_number or "N/A")
        self.set_text(row, 4, tx.employee_name or "—")
        self.set_text(row, 5, tx.payment_method_label)
        self.set_text(row, 6, self.context.money(tx.total_amount))
        self.set_pill(row, 7, tx.status_value, STATUS_COLORS.get(tx.status_value, MUTED_COLOR))

    def _new_transaction(self) -> None:
        fuel_types = list(self.fuel_lookup.snapshot)
        employees = list(self.employee_lookup.snapshot)
        if not fuel_types or not employees:
            self.context.notifier.error("Add at least one active fuel type and employee first")
            return
        self.editor.open_for_create()
        dialog = TransactionDialog(
            self.editor,
            fuel_types=fuel_types,
            employees=employees,
            currency=self.context.settings.currency_symbol,
            parent=self,
        )
        dialog.open()

    def _export(self) -> None:
        path, _ = QFileDialog.getSaveFileName(self, "Export transactions", "transactions.csv", "CSV (*.csv)")
        if not path:
            return
        try:
            count = export_transactions_csv(path, self.view.visible_items())
        except OSError as exc:
            logger.warning("Export to %s failed: %s", path, exc)
            self.context.notifier.error(f"Could not write {path}: {exc}")
            return
        self.context.notifier.success(f"Exported {count} transactions")


class EmployeesPage(CollectionPage):
    title = "Employees"
    subtitle = "Manage your fuel station staff"
    list_title = "Staff Members"
    search_placeholder = "Search employees..."
    empty_text = "No employees found matching your search."
    columns = ("Name", "RFID", "Joined", "Role", "Status", "Actions")

    def __init__(self, context: DashboardContext, parent: Optional[QWidget] = None) -> None:
        super().__init__(context, EMPLOYEES, parent)
        self.editor = self.form(self.view)
        add_button = styled_button("＋ Add Employee")
        add_button.clicked.connect(self._create)
        self.header_actions.addWidget(add_button)

    def render_row(self, row: int, employee: Employee) -> None:
        self.set_text(row, 0, employee.full_name)
        self.set_text(row, 1, employee.rfid_code or "Not set")
        self.set_text(row, 2, format_date(employee.created_at))
        role = employee.role_value
        self.set_pill(row, 3, role.capitalize(), ROLE_COLORS.get(role, MUTED_COLOR))
        self.set_pill(
            row,
            4,
            "Active" if employee.is_active else "Inactive",
            SUCCESS_COLOR if employee.is_active else MUTED_COLOR,
        )
        self.set_actions(
            row,
            5,
            [
                ("✏️", "outline", lambda _=False, e=employee: self._edit(e)),
                ("🗑", "danger", lambda _=False, e=employee: self._delete(e)),
            ],
        )

    def _create(self) -> None:
        self.editor.open_for_create()
        EmployeeDialog(self.editor, self).open()

    def _edit(self, employee: Employee) -> None:
        self.editor.open_for_edit(employee)
        EmployeeDialog(self.editor, self).open()

    def _delete(self, employee: Employee) -> None:
        self.editor.request_delete(employee.id)
        confirm_delete(self, self.editor, f"employee {employee.full_name}")


class FuelTypesPage(CollectionPage):
    title = "Fuel Types"
    subtitle = "Track fuel types and prices"
    list_title = "Fuel Types"
    search_placeholder = "Search fuel types..."
    empty_text = "No fuel types found matching your search."
    columns = ("Name", "Type", "Price / L", "Added", "Status", "Actions")

    def __init__(self, context: DashboardContext, parent: Optional[QWidget] = None) -> None:
        super().__init__(context, FUEL_TYPES, parent)
        self.editor = self.form(self.view)
        add_button = styled_button("＋ Add Fuel Type")
        add_button.clicked.connect(self._create)
        self.header_actions.addWidget(add_button)

    def render_row(self, row: int, fuel: FuelType) -> None:
        self.set_text(row, 0, fuel.name)
        self.set_text(row, 1, fuel.type.capitalize())
        self.set_text(row, 2, self.context.money(fuel.price_per_liter))
        self.set_text(row, 3, format_date(fuel.created_at))
        self.set_pill(
            row,
            4,
            "Available" if fuel.is_active else "Unavailable",
            SUCCESS_COLOR if fuel.is_active else MUTED_COLOR,
        )
        self.set_actions(
            row,
            5,
            [
                ("✏️", "outline", lambda _=False, f=fuel: self._edit(f)),
                ("🗑", "danger", lambda _=False, f=fuel: self._delete(f)),
            ],
        )

    def _create(self) -> None:
        self.editor.open_for_create()
        FuelTypeDialog(self.editor, self).open()

    def _edit(self, fuel: FuelType) -> None:
        self.editor.open_for_edit(fuel)
        FuelTypeDialog(self.editor, self).open()

    def _delete(self, fuel: FuelType) -> None:
        self.editor.request_delete(fuel.id)
        confirm_delete(self, self.editor, f"fuel type {fuel.name}")


class QrPaymentsPage(CollectionPage):
    title = "QR Payments"
    subtitle = "Accept payments via QR codes and digital wallets"
    list_title = "Awaiting Payment"
    search_placeholder = "Search by reference, employee, or fuel type..."
    empty_text = "No pending QR payments."
    columns = ("Created", "Reference", "Fuel", "Liters", "Amount", "Employee", "Actions")

    def __init__(self, context: DashboardContext, parent: Optional[QWidget] = None) -> None:
        super().__init__(context, PENDING_QR, parent)
        self.service = QrPaymentService(
            self.view.client,
            station=context.settings.station_name,
            currency=context.settings.currency_code,
        )
        self.fuel_lookup = self.view_model(FUEL_TYPES.with_filters(is_active=True))
        self.employee_lookup = self.view_model(EMPLOYEES.with_filters(is_active=True))
        self.fuel_lookup.subscribe(self._fill_lookups)
        self.employee_lookup.subscribe(self._fill_lookups)

        form_card = card()
        form_layout = QVBoxLayout(form_card)
        form_layout.setContentsMargins(22, 22, 22, 22)
        form_layout.setSpacing(12)
        form_layout.addWidget(SectionTitle("Start QR Payment"))

        inputs = FlowRow()
        self.fuel_combo = QComboBox()
        self.employee_combo = QComboBox()
        self.liters_edit = QLineEdit()
        self.liters_edit.setPlaceholderText("Liters")
        self.liters_edit.setMaximumWidth(140)
        validator = QDoubleValidator(0.0, 100_000.0, 3, self.liters_edit)
        validator.setNotation(QDoubleValidator.StandardNotation)
        self.liters_edit.setValidator(validator)
        self.generate_button = styled_button("Generate QR")
        self.generate_button.clicked.connect(self._initiate)
        for widget in (self.fuel_combo, self.employee_combo, self.liters_edit, self.generate_button):
            inputs.layout().addWidget(widget)
        inputs.layout().addStretch(1)
        form_layout.addWidget(inputs)

        result = QHBoxLayout()
        self.qr_view = QrCodeView()
        result.addWidget(self.qr_view)
        details = QVBoxLayout()
        self.reference_label = QLabel("")
        self.reference_label.setStyleSheet("font-size: 18px; font-weight: 700;")
        details.addWidget(self.reference_label)
        self.payload_view = QTextEdit()
        self.payload_view.setReadOnly(True)
        self.payload_view.setMaximumHeight(70)
        self.payload_view.setPlaceholderText("QR payload appears here")
        details.addWidget(self.payload_view)
        details.addStretch(1)
        result.addLayout(details, 1)
        form_layout.addLayout(result)

        self.layout().insertWidget(1, form_card)

    def on_enter(self) -> None:
        super().on_enter()
        self.fuel_lookup.refresh()
        self.employee_lookup.refresh()

    def _fill_lookups(self) -> None:
        for combo, items, text in (
            (self.fuel_combo, self.fuel_lookup.snapshot, lambda f: f"{f.name} • {self.context.money(f.price_per_liter)}/L"),
            (self.employee_combo, self.employee_lookup.snapshot, lambda e: e.full_name),
        ):
            current = combo.currentData()
            combo.blockSignals(True)
            combo.clear()
            for item in items:
                combo.addItem(text(item), item.id)
            index = combo.findData(current)
            combo.setCurrentIndex(index if index >= 0 else 0)
            combo.blockSignals(False)

    def _selected_fuel(self) -> Optional[FuelType]:
        key = self.fuel_combo.currentData()
        return next((fuel for fuel in self.fuel_lookup.snapshot if fuel.id == key), None)

    def _initiate(self) -> None:
        fuel = self._selected_fuel()
        if fuel is None:
            self.context.notifier.error("Select a fuel type")
            return
        liters = self.liters_edit.text()
        employee_id = self.employee_combo.currentData()
        self.generate_button.setEnabled(False)

        def work() -> QrPaymentRequest:
            return self.service.initiate(fuel, liters, employee_id)

        def on_success(request: QrPaymentRequest) -> None:
            self.reference_label.setText(
                f"{request.reference} • {self.context.money(request.transaction.total_amount)}"
            )
            self.payload_view.setPlainText(request.payload)
            self.qr_view.set_matrix(request.matrix())
            self.liters_edit.clear()
            self.context.notifier.success(f"QR payment {request.reference} created")
            self.view.notify_mutation_completed()

        def on_error(exc: Exception) -> None:
            if isinstance(exc, ValidationError):
                self.context.notifier.error("; ".join(exc.errors.values()))
            else:
                self.context.notifier.error(error_message(exc, "Failed to create QR payment"))

        def on_finish() -> None:
            self.generate_button.setEnabled(True)

        self.runner.submit(work, on_success=on_success, on_error=on_error, on_finish=on_finish)

    def _settle(self, action: Callable[[str], Transaction], tx: Transaction, done: str) -> None:
        def on_success(_: Any) -> None:
            self.context.notifier.success(f"Payment {tx.receipt_number or tx.id} {done}")
            self.view.notify_mutation_completed()

        def on_error(exc: Exception) -> None:
            self.context.notifier.error(error_message(exc, "Failed to update payment"))

        self.runner.submit(lambda: action(tx.id), on_success=on_success, on_error=on_error)

    def render_row(self, row: int, tx: Transaction) -> None:
        self.set_text(row, 0, format_date(tx.created_at, "%d.%m.%Y %H:%M"))
        self.set_text(row, 1, tx.receipt_number or tx.id)
        self.set_text(row, 2, tx.fuel_type_name or "—")
        self.set_text(row, 3, f"{tx.fuel_amount}L")
        self.set_text(row, 4, self.context.money(tx.total_amount))
        self.set_text(row, 5, tx.employee_name or "—")
        self.set_actions(
            row,
            6,
            [
                ("Paid", "primary", lambda _=False, t=tx: self._settle(self.service.mark_completed, t, "completed")),
                ("Cancel", "danger", lambda _=False, t=tx: self._settle(self.service.cancel, t, "cancelled")),
            ],
        )


class ReportsPage(BasePage):
    def __init__(self, context: DashboardContext, parent: Optional[QWidget] = None) -> None:
        super().__init__(context, parent)
        self.view = self.view_model(TRANSACTIONS.with_limit(context.settings.report_limit))
        self.view.subscribe(self._refresh)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(28, 28, 28, 28)
        layout.setSpacing(16)
        layout.addWidget(SectionTitle("Analytics & Reports", large=True))

        period = FlowRow()
        self.start_edit = QDateEdit(QDate.currentDate().addDays(-30))
        self.end_edit = QDateEdit(QDate.currentDate())
        for edit in (self.start_edit, self.end_edit):
            edit.setCalendarPopup(True)
            edit.setDisplayFormat("dd.MM.yyyy")
            edit.dateChanged.connect(lambda _: self._period_changed())
        refresh_button = styled_button("Refresh", "outline")
        refresh_button.clicked.connect(self._period_changed)
        export_button = styled_button("⬇ Export CSV")
        export_button.clicked.connect(self._export)
        period.layout().addWidget(QLabel("From"))
        period.layout().addWidget(self.start_edit)
        period.layout().addWidget(QLabel("To"))
        period.layout().addWidget(self.end_edit)
        period.layout().addStretch(1)
        period.layout().addWidget(refresh_button)
        period.layout().addWidget(export_button)
        layout.addWidget(period)

        metrics = QGridLayout()
        metrics.setSpacing(12)
        self.revenue_card = MetricCard("Revenue", accent=SUCCESS_COLOR)
        self.liters_card = MetricCard("Liters sold")
        self.count_card = MetricCard("Transactions")
        self.average_card = MetricCard("Average sale", accent=WARNING_COLOR)
        for index, metric in enumerate((self.revenue_card, self.liters_card, self.count_card, self.average_card)):
            metrics.addWidget(metric, 0, index)
        layout.addLayout(metrics)

        tables = QHBoxLayout()
        self.fuel_table = self._table(["Fuel type", "Revenue"])
        self.method_table = self._table(["Payment method", "Count"])
        self.daily_table = self._table(["Date", "Sales", "Liters", "Revenue"])
        tables.addWidget(self.fuel_table)
        tables.addWidget(self.method_table)
        layout.addLayout(tables)
        layout.addWidget(self.daily_table, 1)

    @staticmethod
    def _table(headers: List[str]) -> QTableWidget:
        table = QTableWidget(0, len(headers))
        table.setHorizontalHeaderLabels(headers)
        table.verticalHeader().setVisible(False)
        table.setEditTriggers(QTableWidget.NoEditTriggers)
        table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        return table

    def on_enter(self) -> None:
        self._period_changed()

    def _period(self) -> Between:
        return report_period(self.start_edit.date().toPython(), self.end_edit.date().toPython())

    def _period_changed(self) -> None:
        self.view.set_filter("created_at", self._period())
        self.view.refresh()

    def _summary(self):
        period = self._period()
        return build_report(self.view.snapshot, period.low, period.high)

    def _refresh(self) -> None:
        summary = self._summary()
        money = self.context.money
        self.revenue_card.set_value(money(summary.revenue))
        self.liters_card.set_value(f"{summary.liters:,.2f} L")
        self.count_card.set_value(f"{summary.completed} / {summary.transactions}")
        self.average_card.set_value(money(summary.average_sale))

        self._fill(self.fuel_table, [
            (name, money(revenue))
            for name, revenue in sorted(summary.revenue_by_fuel_type.items(), key=lambda item: item[1], reverse=True)
        ])
        self._fill(self.method_table, [
            (method, str(count))
            for method, count in sorted(summary.by_payment_method.items(), key=lambda item: item[1], reverse=True)
        ])
        self._fill(self.daily_table, [
            (row.day.strftime("%d.%m.%Y"), str(row.transactions), f"{row.liters:,.2f}", money(row.revenue))
            for row in summary.daily
        ])

    @staticmethod
    def _fill(table: QTableWidget, rows: List[tuple]) -> None:
        table.setRowCount(0)
        for values in rows:
            row = table.rowCount()
            table.insertRow(row)
            for column, value in enumerate(values):
                table.setItem(row, column, QTableWidgetItem(value))

    def _export(self) -> None:
        path, _ = QFileDialog.getSaveFileName(self, "Export report", "fuelstation_report.csv", "CSV (*.csv)")
        if not path:
            return
        try:
            export_report_csv(path, self._summary(), title=f"{self.context.settings.station_name} report")
        except OSError as exc:
            logger.warning("Export to %s failed: %s", path, exc)
            self.context.notifier.error(f"Could not write {path}: {exc}")
            return
        self.context.notifier.success("Report exported")


class SettingsPage(BasePage):
    def __init__(self, context: DashboardContext, parent: Optional[QWidget] = None) -> None:
        super().__init__(context, parent)
        settings = context.settings
        layout = QVBoxLayout(self)
        layout.setContentsMargins(28, 28, 28, 28)
        layout.setSpacing(16)
        layout.addWidget(SectionTitle("Settings", large=True))
        hint = QLabel("Values come from FUELSTATION_* environment variables or a .env file.")
        hint.setStyleSheet(f"color: {TEXT_SECONDARY};")
        layout.addWidget(hint)

        info = card()
        grid = QGridLayout(info)
        grid.setContentsMargins(22, 22, 22, 22)
        grid.setHorizontalSpacing(24)
        key = settings.supabase_key
        masked = f"{key[:6]}…{key[-4:]}" if len(key) > 12 else ("set" if key else "not set")
        rows = [
            ("Station", settings.station_name),
            ("Backend URL", settings.supabase_url),
            ("API key", masked),
            ("Request timeout", f"{settings.request_timeout:g} s"),
            ("Transactions shown", str(settings.transaction_limit)),
            ("Report rows", str(settings.report_limit)),
            ("Currency", f"{settings.currency_symbol} ({settings.currency_code})"),
        ]
        for index, (label, value) in enumerate(rows):
            name = QLabel(label)
            name.setStyleSheet(f"color: {TEXT_SECONDARY};")
            grid.addWidget(name, index, 0)
            grid.addWidget(QLabel(value), index, 1)
        layout.addWidget(info)

        actions = FlowRow()
        self.status_pill = PillLabel("Not checked", color=MUTED_COLOR)
        check_button = styled_button("Test connection", "outline")
        check_button.clicked.connect(self.check_connection)
        actions.layout().addWidget(check_button)
        actions.layout().addWidget(self.status_pill)
        actions.layout().addStretch(1)
        layout.addWidget(actions)
        layout.addStretch(1)
        self._client = context.client(FUEL_TYPES)

    def on_enter(self) -> None:
        self.check_connection()

    def check_connection(self) -> None:
        def on_success(online: bool) -> None:
            self.status_pill.setText("🟢 Connected" if online else "🔴 Unreachable")
            self.status_pill.set_color(SUCCESS_COLOR if online else STATUS_COLORS["failed"])

        self.runner.submit(self._client.ping, on_success=on_success)
