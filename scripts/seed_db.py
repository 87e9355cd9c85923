from __future__ import annotations

import importlib

from dotenv import load_dotenv

from qr_attendance.database.bootstrap import ensure_demo_data
from qr_attendance.settings import get_settings_module


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    session_id = ensure_demo_data(db_config)

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(demo class session id={session_id})"
    )


if __name__ == "__main__":
    main()
