from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from campusdash.db import Database

MIGRATED_V2 = "migrated_v2"
MIGRATED_FROM_JSON = "migrated_from_json"


@dataclass(frozen=True)
class UserProfile:
    name: str
    semester: int
    avatar: str


@dataclass
class MetaRepo:
    db: Database

    def get(self, key: str) -> Optional[str]:
        row = self.db.get("meta", "key", key)
        if row is None or row["value"] is None:
            return None
        return str(row["value"])

    def set(self, key: str, value: Any) -> None:
        self.db.upsert("meta", {"key": key, "value": None if value is None else str(value)})

    def get_flag(self, key: str) -> bool:
        return self.get(key) == "true"

    def set_flag(self, key: str, on: bool = True) -> None:
        self.set(key, "true" if on else "false")

    def user_profile(self) -> Optional[UserProfile]:
        name = self.get("user_name")
        if name is None:
            return None
        try:
            semester = int(self.get("user_semester") or 1)
        except ValueError:
            semester = 1
        return UserProfile(name=name, semester=semester, avatar=self.get("user_avatar") or "")

    def set_user_profile(self, name: Any, semester: Any, avatar: Any) -> None:
        with self.db.transaction():
            self.set("user_name", name)
            self.set("user_semester", semester)
            self.set("user_avatar", avatar)
