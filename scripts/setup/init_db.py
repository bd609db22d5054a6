"""
Initialize database: creates all tables.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from permit_admin.database import Base, create_tables, engine
from permit_admin.config import settings
from sqlalchemy import inspect, text


def main():
    print("Permit Admin DB Initialization")
    print("=" * 40)
    print(f"Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("Database connection OK")
    except Exception as e:
        print(f"Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  docker-compose up -d db")
        print("  # or: sudo systemctl start postgresql")
        sys.exit(1)

    print("\nCreating tables...")
    create_tables()

    existing = set(inspect(engine).get_table_names())
    expected = sorted(Base.metadata.tables)
    print(f"\nTables ({len(expected)} expected):")
    for t in expected:
        print(f"   {'ok' if t in existing else 'MISSING'}  {t}")

    print("\nDatabase ready. Provision an admin next:")
    print("   python scripts/setup/create_admin.py --email admin@example.com --name Admin")
    print("Then start the backend:")
    print("   uvicorn permit_admin.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
