from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.event_roster.event_roster.database.connection import DBConfig, DatabaseConnection
from src.event_roster.event_roster.taxonomy.mysql_taxonomy_repository import MySQLTaxonomyRepository

DEMO_TAXONOMY = {
    "organization": ["International School of Example", "City High School"],
    "category": ["Security Council", "General Assembly", "Human Rights Council"],
    "team": ["Venue Team", "Registration Desk", "Press"],
}


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(settings.DB_CONFIG))
    taxonomy = MySQLTaxonomyRepository(conn)

    for dimension, values in DEMO_TAXONOMY.items():
        created = taxonomy.append_new_values(dimension, values)
        print(f"{dimension}: {len(created)} new, {len(values) - len(created)} already present")

    print(f"OK: Seeded taxonomy -> {conn.config.describe()}")


if __name__ == "__main__":
    main()
