#!/usr/bin/env python3
"""
Prepare the database for the tonnage service.

Creates the `oil_tonnages` table and its indexes, then reports whether the
externally imported VCF reference table (`vcftable`) is present and complete.

Usage:
    tonnage-setup-db
    python -m tonnage_service.setup_db --database-url postgresql+psycopg2://user:pw@host/db
"""

import argparse
import sys

from tonnage_service.config import AppConfig
from tonnage_service.db import REFERENCE_COLUMNS, Database
from tonnage_service.errors import StoreError


def main(argv: list[str] | None = None, database: Database | None = None) -> int:
    p = argparse.ArgumentParser(
        prog="tonnage-setup-db",
        description="Create the calculation table and check the VCF reference table.",
    )
    p.add_argument("--database-url", help="SQLAlchemy URL (default: DATABASE_URL / DB_* env)")
    args = p.parse_args(argv)

    if database is None:
        config = AppConfig.from_env().database
        if args.database_url:
            config = config.model_copy(update={"dsn": args.database_url})
        database = Database.from_config(config)
        print(f"Connecting to database at {database.engine.url.render_as_string(hide_password=True)}...")

    try:
        database.init_schema()
        print("✅ oil_tonnages table created successfully")

        print("Checking for VCF table...")
        status = database.reference_status()
    except StoreError as exc:
        print(f"❌ Database setup failed: {exc}", file=sys.stderr)
        return 1
    finally:
        database.dispose()

    if not status.exists:
        print("⚠️ VCF table (vcftable) not found!")
        print("Please import your vcftable.sql file:")
        print("  psql -U <user> -d <database> -h <host> -f vcftable.sql")
    elif status.missing_columns:
        print(f"⚠️ VCF table is missing required columns: {', '.join(status.missing_columns)}")
        print(f"   expected columns: {', '.join(REFERENCE_COLUMNS)}")
    else:
        print(f"✅ VCF table found with {status.row_count} records")

    print("Database setup completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
