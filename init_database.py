#!/usr/bin/env python3
"""Initialize database tables from SQLAlchemy models"""
import sys
from sqlalchemy import inspect

from app import create_app
from config import get_config
from extensions import db


def main():
    print("Initializing Pick A Side database...")
    print("-" * 60)

    try:
        app = create_app(get_config())
        with app.app_context():
            db.create_all()
            tables = inspect(db.engine).get_table_names()
    except Exception as e:
        print(f"\n❌ Error: {e}")
        return 1

    print(f"Created {len(tables)} tables:")
    for table in sorted(tables):
        print(f"  ✓ {table}")
    print("-" * 60)
    return 0


if __name__ == '__main__':
    sys.exit(main())
