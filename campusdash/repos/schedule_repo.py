from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from campusdash.clock import Clock, IdFactory, SystemClock, iso_now, new_id
from campusdash.db import Database


@dataclass(frozen=True)
class ScheduleItem:
    id: str
    day: str
    start_time: str
    end_time: str
    course: str
    location: str
    note: str


@dataclass
class ScheduleRepo:
    db: Database
    clock: Clock = field(default_factory=SystemClock)
    id_factory: IdFactory = new_id

    def list_items(self, day: Optional[str] = None) -> list[ScheduleItem]:
        if day is None:
            rows = self.db.query_all("SELECT * FROM schedule_items ORDER BY day ASC, start_time ASC;")
        else:
            rows = self.db.query_all(
                "SELECT * FROM schedule_items WHERE day = ? ORDER BY start_time ASC;",
                (day,),
            )
        return [
            ScheduleItem(
                id=str(r["id"]),
                day=str(r["day"]),
                start_time=str(r["start_time"] or ""),
                end_time=str(r["end_time"] or ""),
                course=str(r["course"] or ""),
                location=str(r["location"] or ""),
                note=str(r["note"] or ""),
            )
            for r in rows
        ]

    def add_item(
        self,
        day: str,
        start_time: str,
        end_time: str,
        course: str,
        location: str = "",
        note: str = "",
    ) -> str:
        item_id = self.id_factory()
        self.db.insert(
            "schedule_items",
            {
                "id": item_id,
                "day": day,
                "start_time": start_time,
                "end_time": end_time,
                "course": course,
                "location": location,
                "note": note,
                "updated_at": iso_now(self.clock),
            },
        )
        return item_id

    def delete_item(self, item_id: str) -> None:
        self.db.execute("DELETE FROM schedule_items WHERE id = ?;", (item_id,))
