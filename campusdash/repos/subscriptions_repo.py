from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from campusdash.clock import Clock, IdFactory, SystemClock, iso_now, new_id
from campusdash.db import Database


@dataclass(frozen=True)
class Subscription:
    id: str
    name: str
    cost: float
    due_day: int
    last_paid_date: Optional[str]
    created_at: str
    updated_at: str


def row_to_subscription(r) -> Subscription:
    return Subscription(
        id=str(r["id"]),
        name=str(r["name"]),
        cost=float(r["cost"]),
        due_day=int(r["due_day"]),
        last_paid_date=None if r["last_paid_date"] is None else str(r["last_paid_date"]),
        created_at=str(r["created_at"]),
        updated_at=str(r["updated_at"]),
    )


def _validate(cost: float, due_day: int) -> None:
    if cost <= 0:
        raise ValueError("Subscription cost must be positive")
    if not 1 <= int(due_day) <= 31:
        raise ValueError("Subscription due day must be between 1 and 31")


@dataclass
class SubscriptionsRepo:
    db: Database
    clock: Clock = field(default_factory=SystemClock)
    id_factory: IdFactory = new_id

    def list_subscriptions(self) -> list[Subscription]:
        rows = self.db.query_all("SELECT * FROM subscriptions ORDER BY due_day ASC, name ASC;")
        return [row_to_subscription(r) for r in rows]

    def get(self, subscription_id: str) -> Optional[Subscription]:
        r = self.db.get("subscriptions", "id", subscription_id)
        return None if r is None else row_to_subscription(r)

    def add_subscription(self, name: str, cost: float, due_day: int) -> str:
        _validate(cost, due_day)
        now = iso_now(self.clock)
        sub_id = self.id_factory()
        self.db.insert(
            "subscriptions",
            {
                "id": sub_id,
                "name": name,
                "cost": float(cost),
                "due_day": int(due_day),
                "last_paid_date": None,
                "created_at": now,
                "updated_at": now,
            },
        )
        return sub_id

    def update_subscription(self, subscription_id: str, name: str, cost: float, due_day: int) -> None:
        _validate(cost, due_day)
        self.db.execute(
            """
            UPDATE subscriptions
            SET name = ?, cost = ?, due_day = ?, updated_at = ?
            WHERE id = ?;
            """,
            (name, float(cost), int(due_day), iso_now(self.clock), subscription_id),
        )

    def delete_subscription(self, subscription_id: str) -> None:
        self.db.execute("DELETE FROM subscriptions WHERE id = ?;", (subscription_id,))

    def mark_paid(self, subscription_id: str, paid_date: str) -> None:
        self.db.execute(
            "UPDATE subscriptions SET last_paid_date = ?, updated_at = ? WHERE id = ?;",
            (paid_date, iso_now(self.clock), subscription_id),
        )

    def total_monthly_cost(self) -> float:
        row = self.db.query_one("SELECT COALESCE(SUM(cost), 0) AS total FROM subscriptions;")
        return float(row["total"]) if row else 0.0
