from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from campusdash.clock import Clock, IdFactory, SystemClock, iso_now, new_id
from campusdash.db import Database


@dataclass(frozen=True)
class Assignment:
    id: str
    title: str
    course: str
    type: str
    status: str
    deadline: str
    note: str
    created_at: str
    updated_at: str


def _row_to_assignment(r) -> Assignment:
    return Assignment(
        id=str(r["id"]),
        title=str(r["title"] or ""),
        course=str(r["course"] or ""),
        type=str(r["type"] or ""),
        status=str(r["status"] or ""),
        deadline=str(r["deadline"] or ""),
        note=str(r["note"] or ""),
        created_at=str(r["created_at"]),
        updated_at=str(r["updated_at"]),
    )


@dataclass
class AssignmentsRepo:
    db: Database
    clock: Clock = field(default_factory=SystemClock)
    id_factory: IdFactory = new_id

    def list_assignments(self, status: Optional[str] = None) -> list[Assignment]:
        if status is None:
            rows = self.db.query_all("SELECT * FROM assignments ORDER BY deadline ASC;")
        else:
            rows = self.db.query_all(
                "SELECT * FROM assignments WHERE status = ? ORDER BY deadline ASC;",
                (status,),
            )
        return [_row_to_assignment(r) for r in rows]

    def add_assignment(
        self,
        title: str,
        course: str,
        type_: str,
        deadline: str,
        status: str = "to-do",
        note: str = "",
    ) -> str:
        now = iso_now(self.clock)
        assignment_id = self.id_factory()
        self.db.insert(
            "assignments",
            {
                "id": assignment_id,
                "title": title,
                "course": course,
                "type": type_,
                "status": status,
                "deadline": deadline,
                "note": note,
                "created_at": now,
                "updated_at": now,
            },
        )
        return assignment_id

    def update_status(self, assignment_id: str, status: str) -> None:
        self.db.execute(
            "UPDATE assignments SET status = ?, updated_at = ? WHERE id = ?;",
            (status, iso_now(self.clock), assignment_id),
        )

    def delete_assignment(self, assignment_id: str) -> None:
        self.db.execute("DELETE FROM assignments WHERE id = ?;", (assignment_id,))
