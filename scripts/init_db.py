"""Create the attendance engine tables (schedules, cycles, employees, time
entries, absences and extra hours) in the database named by APP_ENV's
settings module. Safe to re-run: every statement is CREATE ... IF NOT EXISTS.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_engine.attendance_engine.database.bootstrap import apply_schema, list_tables

ENGINE_TABLES = (
    "work_schedules",
    "schedule_periods",
    "schedule_time_ranges",
    "work_cycles",
    "employees",
    "time_entries",
    "absences",
    "overtimes",
    "special_hours",
)


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")

    tables = set(list_tables(db_config))
    missing = [t for t in ENGINE_TABLES if t not in tables]
    if missing:
        raise SystemExit(f"Schema incomplete, missing tables: {', '.join(missing)}")

    print(
        "OK: attendance engine schema ready -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"({len(ENGINE_TABLES)} engine tables)"
    )


if __name__ == "__main__":
    main()
