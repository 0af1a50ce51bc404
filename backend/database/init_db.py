"""
Database initialization script
Creates the locations and sync_runs tables if they are missing
"""
import sys
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.append(str(Path(__file__).parent.parent))

from sqlalchemy import inspect
from satsmap.core.config import settings
from satsmap.core.database import engine, init_db


def main():
    print(f"Initializing database at {settings.DATABASE_URL}...")

    init_db(bind=engine)

    tables = inspect(engine).get_table_names()
    print(f"Tables present: {', '.join(sorted(tables))}")
    print("\nDatabase initialization complete!")
    print("You can now start the API server with: uvicorn satsmap.main:app --reload")


if __name__ == "__main__":
    main()
