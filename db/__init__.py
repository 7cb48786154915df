"""
Database package for the Assistant-Lite engine.

Provides SQLAlchemy models, session management, and seed utilities.
"""

from db.base import Base
from db.session import build_engine, build_session_factory, engine, SessionLocal

__all__ = ["Base", "build_engine", "build_session_factory", "engine", "SessionLocal"]
