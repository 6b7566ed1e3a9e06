import logging
import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication, QStandardPaths
from PySide6.QtWidgets import QApplication

from campusdash.clock import SystemClock
from campusdash.config import Settings, load_settings
from campusdash.db import Database, init_db
from campusdash.services.billing import SubscriptionBiller
from campusdash.services.migration import MigrationEngine
from campusdash.ui.deduction_scheduler import DeductionScheduler
from campusdash.ui.main_window import MainWindow

APP_NAME = "CampusDash"

logger = logging.getLogger(__name__)


def set_app_identity() -> None:
    # QStandardPaths derives the app-data folder from these
    QCoreApplication.setApplicationName(APP_NAME)
    QCoreApplication.setOrganizationName(APP_NAME)


def resolve_data_dir(settings: Settings) -> Path:
    if settings.data_dir is not None:
        return settings.data_dir
    location = QStandardPaths.writableLocation(QStandardPaths.AppDataLocation)
    if not location:
        # no platform app-data location (minimal containers)
        return Path.home() / ".campusdash"
    return Path(location)


def configure_logging(settings: Settings, log_path: Path) -> None:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_path, encoding="utf-8"),
        ],
    )


def open_database(settings: Settings, data_dir: Path) -> Database:
    db = Database.open(settings.db_path(data_dir))
    init_db(db)
    return db


def main() -> None:
    set_app_identity()
    app = QApplication(sys.argv)

    settings = load_settings()
    data_dir = resolve_data_dir(settings)
    configure_logging(settings, data_dir / "campusdash.log")
    logger.info("Data directory: %s", data_dir)

    clock = SystemClock()
    db = open_database(settings, data_dir)

    MigrationEngine(
        db,
        candidate_dirs=[data_dir, Path.cwd()],
        clock=clock,
        filename=settings.legacy_file,
        default_currency=settings.default_currency,
    ).run()

    biller = SubscriptionBiller(
        db,
        clock=clock,
        policy=settings.due_day_policy,
        currency=settings.default_currency,
    )
    scheduler = DeductionScheduler(biller, interval_min=settings.deduction_interval_min)
    scheduler.run_once()
    scheduler.start()

    window = MainWindow(db=db, scheduler=scheduler, clock=clock)
    window.show()

    app.aboutToQuit.connect(scheduler.stop)
    app.aboutToQuit.connect(db.close)
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
