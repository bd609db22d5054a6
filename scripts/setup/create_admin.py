"""
Provision a staff account (admin by default).
Usage: python scripts/setup/create_admin.py --email admin@example.com --name "Site Admin"
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from permit_admin.database import SessionLocal, create_tables
from permit_admin.errors import UniqueConstraintViolation
from permit_admin.schemas.user import Role, UserCreate
from permit_admin.security import create_access_token
from permit_admin.services.sql_repository import SqlUserRepository
from permit_admin.services.user_service import provision_user


def main():
    parser = argparse.ArgumentParser(description="Provision a permit admin staff account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", required=True)
    parser.add_argument("--role", default=Role.ADMIN.value, choices=[r.value for r in Role])
    parser.add_argument("--lot", action="append", default=[], help="Assigned lot id (repeatable)")
    args = parser.parse_args()

    create_tables()
    db = SessionLocal()
    try:
        user = provision_user(
            UserCreate(email=args.email, name=args.name, role=args.role, assigned_lots=set(args.lot)),
            SqlUserRepository(db),
        )
    except UniqueConstraintViolation as e:
        print(f"{e}")
        sys.exit(1)
    finally:
        db.close()

    print(f"Created {user.role.value} {user.email}")
    print("Access token (send as 'Authorization: Bearer <token>'):")
    print(f"   {create_access_token(user.id)}")


if __name__ == "__main__":
    main()
