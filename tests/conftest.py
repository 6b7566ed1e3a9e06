import itertools
import json
from datetime import datetime

import pytest

from campusdash.db import Database, init_db


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current


@pytest.fixture
def db():
    database = Database.in_memory()
    init_db(database)
    yield database
    database.close()


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 5, 26, 9, 30))


@pytest.fixture
def ids():
    counter = itertools.count(1)
    return lambda: f"gen-{next(counter)}"


@pytest.fixture
def write_legacy(tmp_path):
    def _write(payload, directory=None, filename="campusdash-db.json"):
        target_dir = directory or tmp_path / "appdata"
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / filename
        if isinstance(payload, str):
            path.write_text(payload, encoding="utf-8")
        else:
            path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write
