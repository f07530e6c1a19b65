from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from PySide6.QtGui import QDoubleValidator
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QVBoxLayout,
    QWidget,
)

from ..models import Employee, EmployeeRole, FuelType, PaymentMethod, TransactionStatus
from ..tables import transaction_total
from ..viewmodels import FormController, FormMode, ValidationError
from .theme import ERROR_COLOR, TEXT_SECONDARY
from .widgets import SectionTitle

Getter = Callable[[], Any]
Setter = Callable[[Any], None]


class RecordDialog(QDialog):
    """Modal form bound to a ``FormController``.

    The dialog closes itself when the controller reports the form closed,
    which happens only after a successful write.
    """

    def __init__(self, controller: FormController, *, noun: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.controller = controller
        self.setModal(True)
        self.setMinimumWidth(440)
        editing = controller.mode is FormMode.EDIT
        self.setWindowTitle(f"Edit {noun}" if editing else f"Add New {noun}")

        layout = QVBoxLayout(self)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.setSpacing(14)
        layout.addWidget(SectionTitle(self.windowTitle()))

        self.form = QFormLayout()
        self.form.setSpacing(10)
        layout.addLayout(self.form)

        self.error_label = QLabel("")
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet(f"color: {ERROR_COLOR};")
        layout.addWidget(self.error_label)

        self.buttons = QDialogButtonBox()
        self.submit_button = self.buttons.addButton(
            f"{'Update' if editing else 'Create'} {noun}", QDialogButtonBox.AcceptRole
        )
        self.submit_button.setProperty("class", "primary")
        cancel = self.buttons.addButton("Cancel", QDialogButtonBox.RejectRole)
        cancel.setProperty("class", "outline")
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)
        layout.addWidget(self.buttons)

        self._fields: Dict[str, Tuple[QWidget, Getter, Setter]] = {}
        self._unsubscribe = controller.subscribe(self._sync)

    # ── field builders ──────────────────────────────────────────────

    def add_text(self, name: str, label: str, *, password: bool = False, placeholder: str = "") -> QLineEdit:
        edit = QLineEdit(self)
        if password:
            edit.setEchoMode(QLineEdit.Password)
        edit.setPlaceholderText(placeholder)
        self._register(name, label, edit, edit.text, lambda value: edit.setText("" if value is None else str(value)))
        return edit

    def add_decimal(self, name: str, label: str, *, placeholder: str = "0.00") -> QLineEdit:
        edit = self.add_text(name, label, placeholder=placeholder)
        validator = QDoubleValidator(0.0, 1_000_000.0, 3, edit)
        validator.setNotation(QDoubleValidator.StandardNotation)
        edit.setValidator(validator)
        return edit

    def add_choice(self, name: str, label: str, options: Sequence[Tuple[str, Any]], *, editable: bool = False) -> QComboBox:
        combo = QComboBox(self)
        combo.setEditable(editable)
        for text, value in options:
            combo.addItem(text, value)

        def getter() -> Any:
            if editable:
                index = combo.findText(combo.currentText())
                return combo.itemData(index) if index >= 0 else combo.currentText()
            return combo.currentData()

        def setter(value: Any) -> None:
            index = combo.findData(value)
            if index >= 0:
                combo.setCurrentIndex(index)
            elif editable:
                combo.setEditText("" if value is None else str(value))
            else:
                combo.setCurrentIndex(-1)

        self._register(name, label, combo, getter, setter)
        return combo

    def add_check(self, name: str, label: str) -> QCheckBox:
        box = QCheckBox(self)
        self._register(name, label, box, box.isChecked, lambda value: box.setChecked(bool(value)))
        return box

    def _register(self, name: str, label: str, widget: QWidget, getter: Getter, setter: Setter) -> None:
        self.form.addRow(label, widget)
        self._fields[name] = (widget, getter, setter)

    # ── controller binding ──────────────────────────────────────────

    def load_draft(self) -> None:
        for name, (_, _, setter) in self._fields.items():
            setter(self.controller.draft.get(name))

    def push_draft(self) -> None:
        for name, (_, getter, _) in self._fields.items():
            self.controller.update_field(name, getter())

    def accept(self) -> None:  # noqa: D401 - Qt override
        self.push_draft()
        try:
            self.controller.submit()
        except ValidationError as exc:
            self._show_errors(exc.errors)

    def reject(self) -> None:  # noqa: D401 - Qt override
        self._unsubscribe()
        if self.controller.is_open:
            self.controller.close()
        super().reject()

    def _show_errors(self, errors: Dict[str, str]) -> None:
        lines = []
        for name, message in errors.items():
            label = self.form.labelForField(self._fields[name][0]) if name in self._fields else None
            title = label.text() if label is not None else name
            lines.append(f"{title}: {message}")
        self.error_label.setText("\n".join(lines))

    def _sync(self) -> None:
        self.submit_button.setEnabled(not self.controller.is_submitting)
        if not self.controller.is_open and self.isVisible():
            self._unsubscribe()
            super().accept()


class EmployeeDialog(RecordDialog):
    def __init__(self, controller: FormController, parent: Optional[QWidget] = None) -> None:
        super().__init__(controller, noun="Employee", parent=parent)
        editing = controller.mode is FormMode.EDIT
        self.add_text("full_name", "Full Name")
        self.add_text(
            "pin",
            "PIN",
            password=True,
            placeholder="Leave blank to keep the current PIN" if editing else "",
        )
        self.add_text("rfid_code", "RFID Code (Optional)")
        self.add_choice("role", "Role", [(role.label, role.value) for role in (
            EmployeeRole.CASHIER, EmployeeRole.MANAGER, EmployeeRole.ADMIN,
        )])
        self.add_check("is_active", "Active")
        self.load_draft()


FUEL_KINDS = ["gasoline", "diesel", "gasohol", "lpg", "ngv"]


class FuelTypeDialog(RecordDialog):
    def __init__(self, controller: FormController, parent: Optional[QWidget] = None) -> None:
        super().__init__(controller, noun="Fuel Type", parent=parent)
        self.add_text("name", "Name", placeholder="e.g. Gasohol 95")
        self.add_choice("type", "Type", [(kind.capitalize(), kind) for kind in FUEL_KINDS], editable=True)
        self.add_decimal("price_per_liter", "Price per liter")
        self.add_check("is_active", "Available")
        self.load_draft()


class TransactionDialog(RecordDialog):
    def __init__(
        self,
        controller: FormController,
        *,
        fuel_types: List[FuelType],
        employees: List[Employee],
        currency: str,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(controller, noun="Transaction", parent=parent)
        self.currency = currency
        self._prices = {fuel.id: fuel.price_per_liter for fuel in fuel_types}
        self.fuel_combo = self.add_choice("fuel_type_id", "Fuel type", [(fuel.name, fuel.id) for fuel in fuel_types])
        self.add_choice("employee_id", "Employee", [(emp.full_name, emp.id) for emp in employees])
        self.amount_edit = self.add_decimal("fuel_amount", "Liters")
        self.price_edit = self.add_decimal("fuel_price_per_liter", "Price per liter")
        self.add_choice("payment_method", "Payment method", [(m.label, m.value) for m in PaymentMethod])
        self.add_choice("status", "Status", [(s.label, s.value) for s in TransactionStatus])
        self.add_text("receipt_number", "Receipt number (Optional)")

        self.total_label = QLabel("")
        self.total_label.setStyleSheet(f"color: {TEXT_SECONDARY}; font-weight: 600;")
        self.form.addRow("Total", self.total_label)

        self.load_draft()
        if controller.mode is FormMode.CREATE:
            self._apply_fuel_price()
        self.fuel_combo.currentIndexChanged.connect(lambda _: self._apply_fuel_price())
        self.amount_edit.textChanged.connect(self._update_total)
        self.price_edit.textChanged.connect(self._update_total)
        self._update_total()

    def _apply_fuel_price(self) -> None:
        price = self._prices.get(self.fuel_combo.currentData())
        if price is not None:
            self.price_edit.setText(str(price))

    def _update_total(self) -> None:
        total = transaction_total(self.amount_edit.text(), self.price_edit.text())
        self.total_label.setText(f"{self.currency}{total:,.2f}")


def confirm_delete(parent: QWidget, controller: FormController, description: str) -> None:
    """Drive the controller's pending confirmation from a non-blocking message box."""
    box = QMessageBox(parent)
    box.setIcon(QMessageBox.Question)
    box.setWindowTitle("Confirm deletion")
    box.setText(f"Are you sure you want to delete {description}?")
    box.setStandardButtons(QMessageBox.Yes | QMessageBox.No)
    box.setDefaultButton(QMessageBox.No)

    def finished(result: int) -> None:
        if result == QMessageBox.Yes:
            controller.confirm_delete()
        else:
            controller.cancel_delete()
        box.deleteLater()

    box.finished.connect(finished)
    box.open()
