from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from campusdash.clock import Clock, SystemClock, iso_now
from campusdash.db import Database

# Letter grade -> grade point (4.00 scale)
GRADE_POINTS: dict[str, float] = {
    "A": 4.00,
    "A-": 3.75,
    "AB": 3.50,
    "B+": 3.25,
    "B": 3.00,
    "BC": 2.50,
    "C": 2.00,
    "D": 1.00,
    "E": 0.00,
}


@dataclass(frozen=True)
class Course:
    id: str
    semester: int
    name: str
    sks: int
    grade: Optional[str]
    updated_at: Optional[str]


@dataclass(frozen=True)
class SemesterSummary:
    semester: int
    ips: float


def weighted_gpa(courses: list[Course]) -> float:
    """
    SKS-weighted mean of grade points. Courses without a recognised grade
    (ungraded, "-", questionnaire placeholders) do not count.
    """
    total_sks = 0
    total_points = 0.0
    for c in courses:
        points = GRADE_POINTS.get((c.grade or "").strip())
        if points is None:
            continue
        total_sks += c.sks
        total_points += points * c.sks
    if total_sks == 0:
        return 0.0
    return round(total_points / total_sks, 2)


def _row_to_course(r) -> Course:
    return Course(
        id=str(r["id"]),
        semester=int(r["semester"]),
        name=str(r["name"] or ""),
        sks=int(r["sks"] or 0),
        grade=None if r["grade"] is None else str(r["grade"]),
        updated_at=None if r["updated_at"] is None else str(r["updated_at"]),
    )


@dataclass
class PerformanceRepo:
    db: Database
    clock: Clock = field(default_factory=SystemClock)

    # ---------- Courses ----------
    def upsert_course(
        self,
        course_id: str,
        semester: int,
        name: str,
        sks: int,
        grade: Optional[str] = None,
    ) -> None:
        if sks < 0:
            raise ValueError("SKS cannot be negative")
        self.db.upsert(
            "performance_courses",
            {
                "id": course_id,
                "semester": int(semester),
                "name": name,
                "sks": int(sks),
                "grade": grade,
                "updated_at": iso_now(self.clock),
            },
        )

    def list_courses(self, semester: Optional[int] = None) -> list[Course]:
        if semester is None:
            rows = self.db.query_all(
                "SELECT * FROM performance_courses ORDER BY semester ASC, id ASC;"
            )
        else:
            rows = self.db.query_all(
                "SELECT * FROM performance_courses WHERE semester = ? ORDER BY id ASC;",
                (int(semester),),
            )
        return [_row_to_course(r) for r in rows]

    # ---------- Semesters ----------
    def list_semesters(self) -> list[SemesterSummary]:
        rows = self.db.query_all("SELECT semester, ips FROM performance_semesters ORDER BY semester ASC;")
        return [SemesterSummary(semester=int(r["semester"]), ips=float(r["ips"])) for r in rows]

    def ensure_semester(self, semester: int, ips: float = 0.0) -> bool:
        return self.db.insert_if_absent("performance_semesters", {"semester": int(semester), "ips": float(ips)})

    def set_ips(self, semester: int, ips: float) -> None:
        self.db.upsert("performance_semesters", {"semester": int(semester), "ips": float(ips)})

    def compute_ips(self, semester: int) -> float:
        return weighted_gpa(self.list_courses(semester))

    def compute_ipk(self) -> float:
        return weighted_gpa(self.list_courses())

    def recalculate_semester(self, semester: int) -> float:
        ips = self.compute_ips(semester)
        self.set_ips(semester, ips)
        return ips
