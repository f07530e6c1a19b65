from __future__ import annotations

import logging
import sys
from typing import Callable, Dict, List, Optional, Tuple

import requests
from PySide6.QtWidgets import QApplication, QHBoxLayout, QMainWindow, QStackedWidget, QWidget

from ..config import AppState, Settings, get_settings
from ..log import configure_logging
from ..runners import SerialRunner
from .pages import (
    BasePage,
    DashboardContext,
    EmployeesPage,
    FuelTypesPage,
    QrPaymentsPage,
    ReportsPage,
    SettingsPage,
    TransactionsPage,
)
from .tasks import TaskRunner
from .theme import apply_palette
from .widgets import NavigationPanel, WindowNotifier

logger = logging.getLogger(__name__)

PageFactory = Callable[[DashboardContext], BasePage]

PAGES: List[Tuple[str, str, str, PageFactory]] = [
    ("transactions", "Transactions", "🧾", TransactionsPage),
    ("employees", "Employees", "👥", EmployeesPage),
    ("fuel_types", "Fuel Types", "⛽", FuelTypesPage),
    ("qr_payments", "QR Payments", "📱", QrPaymentsPage),
    ("reports", "Reports", "📊", ReportsPage),
    ("settings", "Settings", "⚙️", SettingsPage),
]


class MainWindow(QMainWindow):
    def __init__(self, settings: Settings, state: AppState, session: Optional[requests.Session] = None) -> None:
        super().__init__()
        self.settings = settings
        self.state = state
        self.session = session or requests.Session()
        self.setWindowTitle(f"{settings.station_name} Dashboard")
        self.resize(state.window_width, state.window_height)

        self.tasks = TaskRunner(max_threads=1)
        self.runner = SerialRunner(self.tasks)
        self.context = DashboardContext(
            settings=settings,
            notifier=WindowNotifier(self),
            session=self.session,
            runner=self.runner,
        )

        central = QWidget(self)
        self.setCentralWidget(central)
        body = QHBoxLayout(central)
        body.setContentsMargins(18, 18, 18, 18)
        body.setSpacing(18)

        self.nav_panel = NavigationPanel(settings.station_name)
        body.addWidget(self.nav_panel)
        self.content_stack = QStackedWidget()
        body.addWidget(self.content_stack, 1)

        self.pages: Dict[str, BasePage] = {}
        for key, text, icon, factory in PAGES:
            self.nav_panel.add_page(key=key, text=text, icon=icon)
            self._add_page(key, factory(self.context))
        self.nav_panel.page_selected.connect(self._switch_page)

        self._switch_page(state.last_page if state.last_page in self.pages else PAGES[0][0])

    def _add_page(self, key: str, page: BasePage) -> None:
        self.pages[key] = page
        self.content_stack.addWidget(page)

    def _switch_page(self, key: str) -> None:
        if key not in self.pages:
            return
        widget = self.pages[key]
        self.content_stack.setCurrentWidget(widget)
        self.nav_panel.set_current(key)
        self.state.last_page = key
        widget.on_enter()

    def closeEvent(self, event) -> None:  # noqa: D401 - Qt override
        for page in self.pages.values():
            page.dispose()
        self.state.window_width = self.width()
        self.state.window_height = self.height()
        try:
            self.state.save()
        except OSError:
            logger.warning("Could not save dashboard state", exc_info=True)
        self.runner.close()
        if not self.tasks.shutdown():
            logger.warning("Requests still running at exit: %d", self.tasks.in_flight)
        self.session.close()
        super().closeEvent(event)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    if not settings.supabase_key:
        logger.warning("FUELSTATION_SUPABASE_KEY is not set; requests will be anonymous")

    app = QApplication(sys.argv)
    apply_palette(app)

    window = MainWindow(settings, AppState.load())
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":  # pragma: no cover
    main()
