#!/usr/bin/env python3
"""
Database initialization script.

Creates all tables and seeds the demo channel for local runs.
Run this script to initialize a fresh database.
"""

import sys
import os

# Add the parent directory to the path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import config
from db.seed import DEMO_CHANNEL_ID, create_tables, seed_demo_channel
from db.session import engine, SessionLocal


def main():
    """Initialize the database with all tables and seed data."""
    print("=" * 50)
    print("Database Initialization")
    print(f"Target: {config.database.url}")
    print("=" * 50)

    try:
        create_tables(engine)
        print("✓ Tables created successfully")
        seed_demo_channel(SessionLocal)
        print(f"✓ Demo channel ready: {DEMO_CHANNEL_ID}")
        print("=" * 50)
        print("✓ Database initialized successfully!")
        print("=" * 50)
    except Exception as e:
        print(f"✗ Database initialization failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
