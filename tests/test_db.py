import pytest

from campusdash.schema import SCHEMA_VERSION, TABLES


def test_init_creates_all_tables(db):
    names = {r["name"] for r in db.query_all("SELECT name FROM sqlite_master WHERE type = 'table';")}
    assert set(TABLES) <= names
    assert db.get("meta", "key", "schema_version")["value"] == str(SCHEMA_VERSION)


def test_insert_if_absent_reports_whether_written(db):
    assert db.insert_if_absent("meta", {"key": "k", "value": "1"}) is True
    assert db.insert_if_absent("meta", {"key": "k", "value": "2"}) is False
    assert db.get("meta", "key", "k")["value"] == "1"


def test_upsert_replaces(db):
    db.upsert("meta", {"key": "k", "value": "1"})
    db.upsert("meta", {"key": "k", "value": "2"})
    assert db.get("meta", "key", "k")["value"] == "2"


def test_all_with_filter(db):
    db.insert("performance_semesters", {"semester": 1, "ips": 3.0})
    db.insert("performance_semesters", {"semester": 2, "ips": 3.5})
    rows = db.all("performance_semesters", where=("ips", 3.5))
    assert [r["semester"] for r in rows] == [2]
    assert len(db.all("performance_semesters")) == 2


def test_transaction_rolls_back_on_error(db):
    with pytest.raises(RuntimeError):
        with db.transaction():
            db.insert("meta", {"key": "a", "value": "1"})
            raise RuntimeError("boom")
    assert db.get("meta", "key", "a") is None
    assert not db.in_transaction


def test_nested_transaction_joins_outer(db):
    with pytest.raises(RuntimeError):
        with db.transaction():
            with db.transaction():
                db.insert("meta", {"key": "inner", "value": "1"})
            db.insert("meta", {"key": "outer", "value": "1"})
            raise RuntimeError("boom")
    assert db.get("meta", "key", "inner") is None
    assert db.get("meta", "key", "outer") is None


def test_transaction_commits(db):
    with db.transaction():
        db.insert("meta", {"key": "a", "value": "1"})
        db.insert("meta", {"key": "b", "value": "2"})
    assert db.count("meta") == 3


def test_rejects_bad_identifiers(db):
    with pytest.raises(ValueError):
        db.get("meta; DROP TABLE meta", "key", "x")
    with pytest.raises(ValueError):
        db.insert("meta", {"key) VALUES('x'); --": "1"})
