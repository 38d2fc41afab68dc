"""Create the configured database and apply database/schema.sql to it.

Usage: ``APP_ENV=production python scripts/init_db.py``
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module, load_settings

from src.academix.academix.database.bootstrap import apply_schema, list_tables

logger = logging.getLogger("academix.init_db")

SCHEMA_PATH = REPO_ROOT / "database" / "schema.sql"


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    load_dotenv(override=False)
    db_config = dict(load_settings().DB_CONFIG)

    statements = apply_schema(db_config, schema_path=SCHEMA_PATH)
    tables = list_tables(db_config)
    logger.info(
        "%s: %d statements applied to %s on %s, tables: %s",
        get_settings_module(),
        statements,
        db_config.get("database"),
        db_config.get("host"),
        ", ".join(sorted(tables)) or "none",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
