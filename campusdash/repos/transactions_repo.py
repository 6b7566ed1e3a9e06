from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from campusdash.clock import Clock, IdFactory, SystemClock, iso_now, new_id
from campusdash.db import Database

TX_TYPES = ("income", "expense")


# ---------- Small helpers ----------
def format_money(amount: float, currency: str = "IDR") -> str:
    sign = "-" if amount < 0 else ""
    if currency == "IDR":
        # no minor unit, dot thousands separator
        return f"{sign}Rp{abs(amount):,.0f}".replace(",", ".")
    return f"{sign}{currency} {abs(amount):,.2f}"


def signed_amount(amount: float, type_: Optional[str]) -> float:
    """
    Legacy rows sometimes carry a negative amount instead of type='expense'.
    A negative amount is always an outflow; otherwise the type decides.
    """
    if amount < 0:
        return amount
    return amount if type_ == "income" else -amount


@dataclass(frozen=True)
class Transaction:
    id: str
    title: str
    category: str
    amount: float
    currency: str
    date: str
    type: str
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class MonthTotals:
    month: str        # YYYY-MM
    income: float     # positive
    expense: float    # positive
    net: float        # income - expense


def _row_to_tx(r) -> Transaction:
    return Transaction(
        id=str(r["id"]),
        title=str(r["title"] or ""),
        category=str(r["category"] or ""),
        amount=float(r["amount"] or 0),
        currency=str(r["currency"]),
        date=str(r["date"] or ""),
        type=str(r["type"] or ""),
        created_at=str(r["created_at"]),
        updated_at=str(r["updated_at"]),
    )


# ---------- Repo ----------
@dataclass
class TransactionsRepo:
    db: Database
    clock: Clock = field(default_factory=SystemClock)
    id_factory: IdFactory = new_id

    def list_transactions(self, limit: int = 200, month: Optional[str] = None) -> list[Transaction]:
        sql = "SELECT * FROM transactions"
        params: list[object] = []

        if month is not None:
            sql += " WHERE substr(date, 1, 7) = ? "
            params.append(month)

        sql += """
            ORDER BY date DESC, created_at DESC
            LIMIT ?;
        """
        params.append(int(limit))

        return [_row_to_tx(r) for r in self.db.query_all(sql, params)]

    def get(self, transaction_id: str) -> Optional[Transaction]:
        r = self.db.get("transactions", "id", transaction_id)
        return None if r is None else _row_to_tx(r)

    def add_transaction(
        self,
        title: str,
        amount: float,
        type_: str,
        date: str,
        category: str = "",
        currency: str = "IDR",
        transaction_id: Optional[str] = None,
    ) -> str:
        if type_ not in TX_TYPES:
            raise ValueError(f"type must be one of {TX_TYPES}, got {type_!r}")
        now = iso_now(self.clock)
        tx_id = transaction_id or self.id_factory()
        self.db.insert(
            "transactions",
            {
                "id": tx_id,
                "title": title,
                "category": category,
                "amount": float(amount),
                "currency": currency,
                "date": date,
                "type": type_,
                "created_at": now,
                "updated_at": now,
            },
        )
        return tx_id

    def update_transaction(
        self,
        transaction_id: str,
        title: str,
        amount: float,
        type_: str,
        date: str,
        category: str = "",
    ) -> None:
        if type_ not in TX_TYPES:
            raise ValueError(f"type must be one of {TX_TYPES}, got {type_!r}")
        self.db.execute(
            """
            UPDATE transactions
            SET title = ?, amount = ?, type = ?, date = ?, category = ?, updated_at = ?
            WHERE id = ?;
            """,
            (title, float(amount), type_, date, category, iso_now(self.clock), transaction_id),
        )

    def delete_transaction(self, transaction_id: str) -> None:
        self.db.execute("DELETE FROM transactions WHERE id = ?;", (transaction_id,))

    def balance(self) -> float:
        rows = self.db.query_all("SELECT amount, type FROM transactions;")
        return sum(signed_amount(float(r["amount"] or 0), r["type"]) for r in rows)

    def month_totals(self, month: str) -> MonthTotals:
        income = 0.0
        expense = 0.0
        rows = self.db.query_all(
            "SELECT amount, type FROM transactions WHERE substr(date, 1, 7) = ?;",
            (month,),
        )
        for r in rows:
            value = signed_amount(float(r["amount"] or 0), r["type"])
            if value >= 0:
                income += value
            else:
                expense += -value
        return MonthTotals(month=month, income=income, expense=expense, net=income - expense)
