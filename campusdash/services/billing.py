# campusdash/services/billing.py

from __future__ import annotations

import calendar
import enum
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional

from campusdash.clock import Clock, IdFactory, SystemClock, iso_now, new_id
from campusdash.db import Database
from campusdash.errors import DeductionError
from campusdash.repos.subscriptions_repo import Subscription, row_to_subscription

logger = logging.getLogger(__name__)

SUBSCRIPTION_CATEGORY = "Subscription"


class DueDayPolicy(str, enum.Enum):
    # due_day past the end of the month -> last day of that month
    CLAMP = "clamp"
    # due_day past the end of the month -> spills into the next month
    ROLLOVER = "rollover"


def effective_due_day(year: int, month: int, due_day: int, policy: DueDayPolicy) -> int:
    if policy is DueDayPolicy.CLAMP:
        return min(due_day, calendar.monthrange(year, month)[1])
    return due_day


def target_payment_date(year: int, month: int, due_day: int, policy: DueDayPolicy) -> date:
    if policy is DueDayPolicy.CLAMP:
        return date(year, month, effective_due_day(year, month, due_day, policy))
    return date(year, month, 1) + timedelta(days=due_day - 1)


def _parse_paid(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unreadable last_paid_date %r; treating as never paid", value)
        return None


def is_due(sub: Subscription, today: date, policy: DueDayPolicy = DueDayPolicy.CLAMP) -> bool:
    if today.day < effective_due_day(today.year, today.month, sub.due_day, policy):
        return False
    paid = _parse_paid(sub.last_paid_date)
    if paid is None:
        return True
    return (paid.year, paid.month) != (today.year, today.month)


@dataclass(frozen=True)
class Deduction:
    subscription_id: str
    transaction_id: str
    name: str
    amount: float
    paid_date: str


@dataclass
class SubscriptionBiller:
    """
    Turns due subscriptions into expense transactions, at most once per
    subscription per calendar month. The expense row and the last_paid_date
    advance are written in the same transaction.
    """

    db: Database
    clock: Clock = field(default_factory=SystemClock)
    id_factory: IdFactory = new_id
    policy: DueDayPolicy = DueDayPolicy.CLAMP
    currency: str = "IDR"

    def check_and_process_deductions(self) -> int:
        return len(self.process_deductions())

    def process_deductions(self) -> list[Deduction]:
        today = self.clock.now().date()
        now = iso_now(self.clock)
        made: list[Deduction] = []

        try:
            with self.db.transaction():
                for row in self.db.all("subscriptions"):
                    sub = row_to_subscription(row)
                    if not is_due(sub, today, self.policy):
                        continue
                    made.append(self._charge(sub, today, now))
        except Exception as exc:
            raise DeductionError(f"Subscription deductions rolled back: {exc}") from exc

        for d in made:
            logger.info("Deducted subscription %r: %.2f on %s", d.name, d.amount, d.paid_date[:10])
        logger.info("Subscription check done: %d deduction(s)", len(made))
        return made

    def _charge(self, sub: Subscription, today: date, now: str) -> Deduction:
        paid_on = target_payment_date(today.year, today.month, sub.due_day, self.policy)
        paid_date = datetime.combine(paid_on, time()).isoformat()
        tx_id = self.id_factory()

        self.db.insert(
            "transactions",
            {
                "id": tx_id,
                "title": f"Subscription: {sub.name}",
                "category": SUBSCRIPTION_CATEGORY,
                "amount": sub.cost,
                "currency": self.currency,
                "date": paid_date,
                "type": "expense",
                "created_at": now,
                "updated_at": now,
            },
        )
        self.db.execute(
            "UPDATE subscriptions SET last_paid_date = ?, updated_at = ? WHERE id = ?;",
            (paid_date, now, sub.id),
        )
        return Deduction(
            subscription_id=sub.id,
            transaction_id=tx_id,
            name=sub.name,
            amount=sub.cost,
            paid_date=paid_date,
        )
