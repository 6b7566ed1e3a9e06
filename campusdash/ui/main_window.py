from __future__ import annotations

from PySide6.QtWidgets import (
    QMainWindow,
    QWidget,
    QHBoxLayout,
    QVBoxLayout,
    QPushButton,
    QStackedWidget,
    QStatusBar,
)
from PySide6.QtCore import Qt

from campusdash.clock import Clock
from campusdash.db import Database
from campusdash.repos.assignments_repo import AssignmentsRepo
from campusdash.repos.meta_repo import MetaRepo
from campusdash.repos.performance_repo import PerformanceRepo
from campusdash.repos.schedule_repo import ScheduleRepo
from campusdash.repos.subscriptions_repo import SubscriptionsRepo
from campusdash.repos.transactions_repo import TransactionsRepo, format_money
from campusdash.ui.deduction_scheduler import DeductionScheduler
from campusdash.ui.table_page import TablePage


class MainWindow(QMainWindow):
    def __init__(self, db: Database, scheduler: DeductionScheduler, clock: Clock) -> None:
        super().__init__()
        self.db = db
        self.clock = clock
        self.scheduler = scheduler

        self.tx_repo = TransactionsRepo(db, clock)
        self.subs_repo = SubscriptionsRepo(db, clock)
        self.perf_repo = PerformanceRepo(db, clock)
        self.assignments_repo = AssignmentsRepo(db, clock)
        self.schedule_repo = ScheduleRepo(db, clock)

        profile = MetaRepo(db).user_profile()
        title = "CampusDash" if profile is None else f"CampusDash - {profile.name}"
        self.setWindowTitle(title)
        self.setMinimumSize(1000, 650)

        # Central widget
        central = QWidget()
        self.setCentralWidget(central)
        root_layout = QHBoxLayout(central)
        root_layout.setContentsMargins(0, 0, 0, 0)

        # Sidebar
        sidebar = QWidget()
        sidebar.setFixedWidth(220)
        sidebar_layout = QVBoxLayout(sidebar)
        sidebar_layout.setContentsMargins(12, 12, 12, 12)
        sidebar_layout.setSpacing(8)

        self.stack = QStackedWidget()
        self.pages = self._build_pages()
        for page in self.pages.values():
            self.stack.addWidget(page)

        self.buttons = {}
        for name in self.pages.keys():
            button = QPushButton(name)
            button.setCursor(Qt.PointingHandCursor)
            button.setStyleSheet(self._button_style(False))
            button.clicked.connect(
                lambda checked=False, n=name: self.show_page(n)
            )
            sidebar_layout.addWidget(button)
            self.buttons[name] = button

        sidebar_layout.addStretch()

        root_layout.addWidget(sidebar)
        root_layout.addWidget(self.stack, 1)

        self.setStatusBar(QStatusBar())
        self.scheduler.deductions_made.connect(self._on_deductions)
        self.scheduler.deduction_failed.connect(
            lambda msg: self.statusBar().showMessage(f"Subscription check failed: {msg}")
        )

        self.show_page("Cashflow")

    def _build_pages(self) -> dict[str, TablePage]:
        subscriptions = TablePage(
            "Subscriptions",
            [
                ("Name", lambda s: s.name, False),
                ("Due day", lambda s: s.due_day, True),
                ("Cost", lambda s: format_money(s.cost), True),
                ("Last paid", lambda s: (s.last_paid_date or "never")[:10], False),
            ],
            self.subs_repo.list_subscriptions,
            lambda: f"Total monthly cost: {format_money(self.subs_repo.total_monthly_cost())}",
        )
        subscriptions.add_action("Check deductions", self.scheduler.run_once)

        return {
            "Cashflow": TablePage(
                "Cashflow",
                [
                    ("Date", lambda t: t.date[:10], False),
                    ("Title", lambda t: t.title, False),
                    ("Category", lambda t: t.category, False),
                    ("Type", lambda t: t.type, False),
                    ("Amount", lambda t: format_money(t.amount, t.currency), True),
                ],
                lambda: self.tx_repo.list_transactions(limit=500),
                self._cashflow_summary,
            ),
            "Subscriptions": subscriptions,
            "Performance": TablePage(
                "Performance",
                [
                    ("Semester", lambda s: s.semester, True),
                    ("IPS", lambda s: f"{s.ips:.2f}", True),
                ],
                self.perf_repo.list_semesters,
                lambda: f"IPK: {self.perf_repo.compute_ipk():.2f}",
            ),
            "Assignments": TablePage(
                "Assignments",
                [
                    ("Deadline", lambda a: a.deadline[:10], False),
                    ("Title", lambda a: a.title, False),
                    ("Course", lambda a: a.course, False),
                    ("Type", lambda a: a.type, False),
                    ("Status", lambda a: a.status, False),
                ],
                self.assignments_repo.list_assignments,
            ),
            "Schedule": TablePage(
                "Schedule",
                [
                    ("Day", lambda i: i.day, False),
                    ("Start", lambda i: i.start_time, False),
                    ("End", lambda i: i.end_time, False),
                    ("Course", lambda i: i.course, False),
                    ("Location", lambda i: i.location, False),
                ],
                self.schedule_repo.list_items,
            ),
        }

    def _cashflow_summary(self) -> str:
        month = self.clock.now().strftime("%Y-%m")
        totals = self.tx_repo.month_totals(month)
        return (
            f"Balance {format_money(self.tx_repo.balance())} • "
            f"{month}: in {format_money(totals.income)}, out {format_money(totals.expense)}"
        )

    def _on_deductions(self, count: int) -> None:
        self.statusBar().showMessage(f"{count} subscription payment(s) recorded")
        self.pages["Cashflow"].refresh()
        self.pages["Subscriptions"].refresh()

    def show_page(self, name: str) -> None:
        self.stack.setCurrentWidget(self.pages[name])

        for btn_name, btn in self.buttons.items():
            btn.setStyleSheet(
                self._button_style(btn_name == name)
            )

    @staticmethod
    def _button_style(active: bool) -> str:
        if active:
            return """
                QPushButton {
                    padding: 10px;
                    text-align: left;
                    border-radius: 8px;
                    background-color: #2d2d2d;
                    color: white;
                    font-size: 14px;
                }
            """
        return """
            QPushButton {
                padding: 10px;
                text-align: left;
                border-radius: 8px;
                background-color: transparent;
                color: #cccccc;
                font-size: 14px;
            }
            QPushButton:hover {
                background-color: #1f1f1f;
            }
        """
