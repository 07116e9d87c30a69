"""
Create all database tables from the SQLAlchemy models

Usage:
  python scripts/create_tables.py
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sqlalchemy import inspect

from fomcert.database import engine, metadata
import fomcert.models  # noqa: F401  registers the tables on metadata


def main():
    metadata.create_all(engine)
    tables = inspect(engine).get_table_names()
    print(f"[OK] Tables ready: {', '.join(sorted(tables))}")


if __name__ == "__main__":
    main()
