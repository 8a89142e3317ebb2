#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the database is reachable and the schema exists.
Usage: python scripts/check_connections.py
"""
import sys
sys.path.insert(0, '.')

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.db.postgres import engine, test_database_connection
from app.db.schema import init_schema, metadata


def main():
    settings = get_settings()
    print("=" * 50)
    print("INTERNMATCH - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] Testing database...")
    if settings.database_url:
        print(f"    URL: {engine.url.render_as_string(hide_password=True)}")
    else:
        print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    if not test_database_connection():
        print("    ❌ Database: FAILED")
        return 1
    print("    ✅ Database: CONNECTED")

    print("\n[2] Ensuring schema...")
    try:
        init_schema(engine)
    except SQLAlchemyError as e:
        print(f"    ❌ Schema: FAILED ({e})")
        return 1
    print(f"    ✅ Schema: {len(metadata.tables)} tables ready")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(main())
