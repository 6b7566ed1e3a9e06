import pytest

from campusdash.repos.assignments_repo import AssignmentsRepo
from campusdash.repos.meta_repo import MetaRepo
from campusdash.repos.performance_repo import Course, PerformanceRepo, weighted_gpa
from campusdash.repos.schedule_repo import ScheduleRepo
from campusdash.repos.subscriptions_repo import SubscriptionsRepo
from campusdash.repos.transactions_repo import TransactionsRepo, format_money, signed_amount


class TestTransactionsRepo:
    def test_add_and_list(self, db, clock, ids):
        repo = TransactionsRepo(db, clock, ids)
        repo.add_transaction("Salary", 5000, "income", "2024-05-01T00:00:00", category="Job")
        repo.add_transaction("Lunch", 50, "expense", "2024-05-03T00:00:00", category="Food")

        rows = repo.list_transactions()
        assert [t.title for t in rows] == ["Lunch", "Salary"]
        assert rows[0].currency == "IDR"

    def test_rejects_unknown_type(self, db):
        with pytest.raises(ValueError):
            TransactionsRepo(db).add_transaction("X", 1, "transfer", "2024-05-01")

    def test_update_and_delete(self, db, clock, ids):
        repo = TransactionsRepo(db, clock, ids)
        tx_id = repo.add_transaction("Lunch", 50, "expense", "2024-05-03")
        repo.update_transaction(tx_id, "Dinner", 70, "expense", "2024-05-04", category="Food")
        assert repo.get(tx_id).title == "Dinner"
        assert repo.get(tx_id).amount == 70
        repo.delete_transaction(tx_id)
        assert repo.get(tx_id) is None

    def test_balance_and_month_totals(self, db, clock, ids):
        repo = TransactionsRepo(db, clock, ids)
        repo.add_transaction("Salary", 1000, "income", "2024-05-01")
        repo.add_transaction("Rent", 400, "expense", "2024-05-02")
        repo.add_transaction("Old", 100, "expense", "2024-04-30")
        # legacy rows may carry a negative amount
        db.insert("transactions", {
            "id": "legacy", "title": "Snack", "amount": -25, "currency": "IDR",
            "date": "2024-05-09", "type": "income", "created_at": "x", "updated_at": "x",
        })

        assert repo.balance() == 1000 - 400 - 100 - 25
        totals = repo.month_totals("2024-05")
        assert totals.income == 1000
        assert totals.expense == 425
        assert totals.net == 575
        assert [t.title for t in repo.list_transactions(month="2024-04")] == ["Old"]

    def test_helpers(self):
        assert signed_amount(10, "income") == 10
        assert signed_amount(10, "expense") == -10
        assert signed_amount(-10, "income") == -10
        assert format_money(1500000) == "Rp1.500.000"
        assert format_money(-12.5, "USD") == "-USD 12.50"


class TestSubscriptionsRepo:
    def test_crud(self, db, clock, ids):
        repo = SubscriptionsRepo(db, clock, ids)
        sub_id = repo.add_subscription("Spotify", 54990, 25)
        repo.add_subscription("Gym", 150000, 5)

        assert [s.name for s in repo.list_subscriptions()] == ["Gym", "Spotify"]
        assert repo.total_monthly_cost() == 204990

        repo.update_subscription(sub_id, "Spotify Duo", 71990, 26)
        updated = repo.get(sub_id)
        assert (updated.name, updated.cost, updated.due_day) == ("Spotify Duo", 71990, 26)

        repo.delete_subscription(sub_id)
        assert repo.get(sub_id) is None

    @pytest.mark.parametrize("cost,due_day", [(0, 1), (-5, 1), (10, 0), (10, 32)])
    def test_validation(self, db, cost, due_day):
        with pytest.raises(ValueError):
            SubscriptionsRepo(db).add_subscription("Bad", cost, due_day)


class TestPerformanceRepo:
    def test_ips_weighted_by_sks(self, db, clock):
        repo = PerformanceRepo(db, clock)
        repo.upsert_course("c1", 1, "Calculus", 4, "A")
        repo.upsert_course("c2", 1, "Physics", 2, "C")
        repo.upsert_course("c3", 1, "Survey", 2, "Belum Isi Kuesioner")
        repo.upsert_course("c4", 2, "Algebra", 3, "B")

        # (4*4.0 + 2*2.0) / 6
        assert repo.compute_ips(1) == 3.33
        assert repo.compute_ips(2) == 3.0
        assert repo.compute_ips(5) == 0.0
        # (16 + 4 + 9) / 9
        assert repo.compute_ipk() == 3.22

    def test_recalculate_stores_ips(self, db, clock):
        repo = PerformanceRepo(db, clock)
        repo.ensure_semester(1, 3.5)
        repo.upsert_course("c1", 1, "Calculus", 3, "AB")
        assert repo.recalculate_semester(1) == 3.5
        repo.upsert_course("c1", 1, "Calculus", 3, "B")
        repo.recalculate_semester(1)
        assert [(s.semester, s.ips) for s in repo.list_semesters()] == [(1, 3.0)]

    def test_ensure_semester_keeps_existing(self, db):
        repo = PerformanceRepo(db)
        assert repo.ensure_semester(2, 3.5) is True
        assert repo.ensure_semester(2, 0.0) is False
        assert repo.list_semesters()[0].ips == 3.5

    def test_weighted_gpa_ignores_ungraded(self):
        courses = [Course("a", 1, "A", 3, None, None), Course("b", 1, "B", 3, "-", None)]
        assert weighted_gpa(courses) == 0.0


class TestMetaRepo:
    def test_profile_roundtrip(self, db):
        meta = MetaRepo(db)
        assert meta.user_profile() is None
        meta.set_user_profile("Ellaku", 4, "avatar.png")
        profile = meta.user_profile()
        assert (profile.name, profile.semester, profile.avatar) == ("Ellaku", 4, "avatar.png")

    def test_flags(self, db):
        meta = MetaRepo(db)
        assert meta.get_flag("migrated_v2") is False
        meta.set_flag("migrated_v2")
        assert meta.get("migrated_v2") == "true"
        meta.set_flag("migrated_v2", False)
        assert meta.get_flag("migrated_v2") is False


def test_assignments_repo(db, clock, ids):
    repo = AssignmentsRepo(db, clock, ids)
    first = repo.add_assignment("Essay", "Literature", "individual", "2024-06-01")
    repo.add_assignment("Lab", "Physics", "group", "2024-05-20", status="done")

    assert [a.title for a in repo.list_assignments()] == ["Lab", "Essay"]
    repo.update_status(first, "done")
    assert len(repo.list_assignments(status="done")) == 2
    repo.delete_assignment(first)
    assert [a.title for a in repo.list_assignments()] == ["Lab"]


def test_schedule_repo(db, clock, ids):
    repo = ScheduleRepo(db, clock, ids)
    repo.add_item("Monday", "10:00", "12:00", "Physics")
    first = repo.add_item("Monday", "08:00", "10:00", "Calculus", location="R101")
    repo.add_item("Tuesday", "08:00", "09:00", "Chemistry")

    assert [i.course for i in repo.list_items("Monday")] == ["Calculus", "Physics"]
    repo.delete_item(first)
    assert len(repo.list_items()) == 2
