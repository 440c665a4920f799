"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for the account directory: users, groups,
group memberships and contact connections.
"""

from datetime import datetime
from pathlib import Path
from sqlalchemy import create_engine, Boolean, Column, String, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()

USER = "user"
GROUP = "group"


class Account(Base):
    """A user or group account."""

    __tablename__ = "accounts"

    id = Column(String, primary_key=True)
    kind = Column(String, nullable=False, default=USER)  # user, group
    first_name = Column(String)
    last_name = Column(String)
    preferred_name = Column(String)
    email = Column(String)
    picture = Column(String)
    department = Column(String)
    private = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


class Membership(Base):
    """Group membership edge."""

    __tablename__ = "memberships"

    group_id = Column(String, primary_key=True)
    member_id = Column(String, primary_key=True)


class Connection(Base):
    """Contact edge from owner to target."""

    __tablename__ = "connections"

    owner_id = Column(String, primary_key=True)
    target_id = Column(String, primary_key=True)
    state = Column(String, nullable=False)  # ConnectionState value
    created_at = Column(DateTime, nullable=False, default=datetime.now)


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()
