# campusdash/services/migration.py

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from campusdash.clock import Clock, IdFactory, SystemClock, iso_now, new_id
from campusdash.db import Database
from campusdash.errors import CampusDashError, MigrationError
from campusdash.repos.meta_repo import MIGRATED_FROM_JSON, MIGRATED_V2, MetaRepo

from .legacy_source import LEGACY_FILENAME, LegacyDocument, load_legacy_document, locate_legacy_file

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "IDR"
PLACEHOLDER_SKS = 3
PLACEHOLDER_IPS = 3.5
PROFILE_SEMESTER_IPS = 0.0

_LEADING_INT = re.compile(r"\s*[+-]?\d+")


class MigrationStatus(enum.Enum):
    NO_SOURCE = "no_source"
    ALREADY_MIGRATED = "already_migrated"
    COMPLETED = "completed"


@dataclass
class MigrationReport:
    status: MigrationStatus
    source: Optional[Path] = None
    transactions: int = 0
    courses: int = 0
    semesters: int = 0
    assignments: int = 0
    schedule_items: int = 0
    skipped: int = 0
    profile_imported: bool = False


def semester_from_course_id(course_id: Any) -> int:
    """
    'course-3-2' -> 3. The second segment is read by its leading digits
    ('course-3x-1' -> 3); without any, the semester is 1.
    """
    parts = str(course_id or "").split("-")
    if len(parts) < 2:
        return 1
    match = _LEADING_INT.match(parts[1])
    return int(match.group(0)) if match else 1


def _course_ref(item: dict[str, Any]) -> Any:
    return item.get("courseId") or item.get("course")


@dataclass
class MigrationEngine:
    """
    Imports the pre-SQLite JSON store once. Safe to call on every startup:
    the meta flag `migrated_v2` short-circuits later runs, and a failed run
    leaves no rows and no flag behind so the next startup retries.
    """

    db: Database
    candidate_dirs: list[Union[Path, str, None]]
    clock: Clock = field(default_factory=SystemClock)
    id_factory: IdFactory = new_id
    filename: str = LEGACY_FILENAME
    default_currency: str = DEFAULT_CURRENCY

    def run(self) -> None:
        try:
            self.migrate()
        except CampusDashError as exc:
            logger.error("Legacy migration failed, will retry on next start: %s", exc)

    def migrate(self) -> MigrationReport:
        source = locate_legacy_file(self.candidate_dirs, self.filename)
        if source is None:
            return MigrationReport(status=MigrationStatus.NO_SOURCE)

        meta = MetaRepo(self.db)
        logger.debug(
            "Migration flags: %s=%s %s=%s",
            MIGRATED_FROM_JSON, meta.get(MIGRATED_FROM_JSON),
            MIGRATED_V2, meta.get(MIGRATED_V2),
        )
        if meta.get_flag(MIGRATED_V2):
            logger.info("Legacy data already migrated; skipping")
            return MigrationReport(status=MigrationStatus.ALREADY_MIGRATED, source=source)

        logger.info("Starting legacy migration from %s", source)
        doc = load_legacy_document(source)

        report = MigrationReport(status=MigrationStatus.COMPLETED, source=source)
        try:
            with self.db.transaction():
                self._import(doc, report, meta)
        except Exception as exc:
            raise MigrationError(f"Import from {source} rolled back: {exc}") from exc

        logger.info(
            "Legacy migration committed: %d transactions, %d courses, %d semesters, "
            "%d assignments, %d schedule items, %d skipped",
            report.transactions, report.courses, report.semesters,
            report.assignments, report.schedule_items, report.skipped,
        )
        return report

    # ---------- Import steps (all inside one transaction) ----------
    def _import(self, doc: LegacyDocument, report: MigrationReport, meta: MetaRepo) -> None:
        now = iso_now(self.clock)

        self._import_transactions(doc.transactions, now, report)
        semesters = self._import_grades(doc.grades, now, report)
        for sem in sorted(semesters):
            if self.db.insert_if_absent("performance_semesters", {"semester": sem, "ips": PLACEHOLDER_IPS}):
                report.semesters += 1
        self._import_profile(doc.user_profile, meta, report)
        self._import_assignments(doc.assignments, now, report)
        self._import_schedule(doc.schedule, now, report)

        meta.set_flag(MIGRATED_V2)
        meta.set_flag(MIGRATED_FROM_JSON)

    def _import_transactions(self, items: list[dict[str, Any]], now: str, report: MigrationReport) -> None:
        for item in items:
            try:
                amount = float(item.get("amount"))
            except (TypeError, ValueError):
                logger.warning("Skipping legacy transaction %r: bad amount %r", item.get("id"), item.get("amount"))
                report.skipped += 1
                continue
            written = self.db.insert_if_absent(
                "transactions",
                {
                    "id": item.get("id") or self.id_factory(),
                    "title": item.get("title"),
                    "category": item.get("category"),
                    "amount": amount,
                    "currency": item.get("currency") or self.default_currency,
                    "date": item.get("date"),
                    "type": item.get("type"),
                    "created_at": item.get("createdAt") or now,
                    "updated_at": now,
                },
            )
            report.transactions += int(written)
        logger.info("Imported %d of %d legacy transactions", report.transactions, len(items))

    def _import_grades(self, items: list[dict[str, Any]], now: str, report: MigrationReport) -> set[int]:
        semesters: set[int] = set()
        for item in items:
            course_id = item.get("courseId") or item.get("id")
            if not course_id:
                logger.warning("Skipping legacy grade without courseId/id")
                report.skipped += 1
                continue
            semester = semester_from_course_id(item.get("courseId"))
            semesters.add(semester)
            self.db.upsert(
                "performance_courses",
                {
                    "id": course_id,
                    "semester": semester,
                    "name": item.get("courseId") or course_id,
                    "sks": PLACEHOLDER_SKS,
                    "grade": item.get("grade"),
                    "updated_at": item.get("updatedAt") or now,
                },
            )
            report.courses += 1
        logger.info("Imported %d grades across semesters %s", report.courses, sorted(semesters))
        return semesters

    def _import_profile(self, profiles: list[dict[str, Any]], meta: MetaRepo, report: MigrationReport) -> None:
        if not profiles:
            return
        profile = profiles[0]
        meta.set("user_name", profile.get("name"))
        meta.set("user_semester", profile.get("semester"))
        meta.set("user_avatar", profile.get("avatar"))
        report.profile_imported = True

        try:
            current = int(profile.get("semester"))
        except (TypeError, ValueError):
            logger.warning("Legacy profile semester %r is not a number", profile.get("semester"))
            return
        if self.db.insert_if_absent("performance_semesters", {"semester": current, "ips": PROFILE_SEMESTER_IPS}):
            report.semesters += 1
        logger.info("Imported user profile %r (semester %d)", profile.get("name"), current)

    def _import_assignments(self, items: list[dict[str, Any]], now: str, report: MigrationReport) -> None:
        for item in items:
            written = self.db.insert_if_absent(
                "assignments",
                {
                    "id": item.get("id") or self.id_factory(),
                    "title": item.get("title"),
                    "course": _course_ref(item),
                    "type": item.get("type"),
                    "status": item.get("status"),
                    "deadline": item.get("deadline"),
                    "note": item.get("note") or "",
                    "created_at": item.get("createdAt") or now,
                    "updated_at": item.get("updatedAt") or now,
                },
            )
            report.assignments += int(written)
        logger.info("Imported %d of %d legacy assignments", report.assignments, len(items))

    def _import_schedule(self, items: list[dict[str, Any]], now: str, report: MigrationReport) -> None:
        for item in items:
            if not item.get("id") or not item.get("day"):
                report.skipped += 1
                continue
            written = self.db.insert_if_absent(
                "schedule_items",
                {
                    "id": item["id"],
                    "day": item["day"],
                    "start_time": item.get("startTime"),
                    "end_time": item.get("endTime"),
                    "course": _course_ref(item),
                    "location": item.get("location") or "",
                    "note": item.get("note") or "",
                    "updated_at": now,
                },
            )
            report.schedule_items += int(written)
        logger.info("Imported %d of %d legacy schedule entries", report.schedule_items, len(items))
