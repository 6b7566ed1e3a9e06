from __future__ import annotations

from app import main, open_database, resolve_data_dir, set_app_identity
from campusdash.config import load_settings


if __name__ == "__main__":

    set_app_identity()
    settings = load_settings()
    db = open_database(settings, resolve_data_dir(settings))
    db.close()

    main()
