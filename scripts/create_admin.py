#!/usr/bin/env python3
"""
Create an admin account (admins cannot sign up through the API).

Usage: python scripts/create_admin.py EMAIL PASSWORD [FULL_NAME]
"""
import sys
sys.path.insert(0, '.')

from app.core.errors import ConflictError
from app.db.postgres import engine
from app.db.schema import init_schema
from app.services.admin_service import create_admin_account


def main():
    if len(sys.argv) < 3:
        print(__doc__)
        return 1

    email, password = sys.argv[1], sys.argv[2]
    full_name = sys.argv[3] if len(sys.argv) > 3 else "Administrator"

    init_schema(engine)
    try:
        admin_id = create_admin_account(email, password, full_name)
    except ConflictError as e:
        print(f"❌ {e.message}")
        return 1

    print(f"✅ Admin created: {email} (id {admin_id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
