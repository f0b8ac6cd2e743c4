"""Create the laws table (and any other model tables) if missing"""
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parent
sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import inspect

from lawdesk.core.database import get_engine, init_db


def main() -> int:
    engine = get_engine()
    print("Creating tables from models...")
    init_db(engine)

    tables = inspect(engine).get_table_names()
    print(f"\n{len(tables)} tables present:")
    for table in sorted(tables):
        print(f"  {table}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
