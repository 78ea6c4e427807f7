from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.timesheet_api.timesheet_api.database.bootstrap import apply_seed_sql
from src.timesheet_api.timesheet_api.database.connection import DBConfig


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    target = DBConfig.from_dict(dict(settings.DB_CONFIG))

    apply_seed_sql(target, seed_path=REPO_ROOT / "database" / "seed.sql")
    print(f"OK: Seeded database -> {target.describe()}")


if __name__ == "__main__":
    main()
