"""
SQL-backed directory and connection services.

Library errors are translated at this boundary: any SQLAlchemyError
becomes StorageUnavailable so the assembler can treat it as a backend
failure.
"""

import functools
import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from .database import GROUP, USER, Account, Connection, Membership
from .errors import AuthorizationDenied, CallerContractError, StorageUnavailable
from .logger import get_logger
from .models import Authorizable, ConnectionState, Group, Profile
from .schema import validate_seed

logger = get_logger()

PROFILE_COLUMNS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "preferredName": "preferred_name",
    "email": "email",
    "picture": "picture",
    "department": "department",
}


def storage_errors(func: Callable) -> Callable:
    """Translate SQLAlchemy failures into StorageUnavailable."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"{func.__name__} failed: {e}") from e
    return wrapper


def account_properties(account: Account) -> Dict[str, Any]:
    props = {}
    for key, column in PROFILE_COLUMNS.items():
        value = getattr(account, column)
        if value is not None:
            props[key] = value
    return props


class SqlDirectoryService:
    """
    Resolves account ids for `viewer_id`.

    Private accounts are only readable by themselves and by accounts that
    hold an accepted connection to them.
    """

    def __init__(self, session, viewer_id: str):
        self.session = session
        self.viewer_id = viewer_id

    @storage_errors
    def find_authorizable(self, authorizable_id: str) -> Optional[Authorizable]:
        account = self.session.get(Account, authorizable_id)
        if account is None:
            return None
        if account.private and not self._can_view(account.id):
            raise AuthorizationDenied(f"{self.viewer_id} may not read {account.id}")

        # Members and principals are left empty here; get_members and
        # get_principals query them on demand.
        props = account_properties(account)
        if account.kind == GROUP:
            return Group(id=account.id, properties=props)
        return Profile(id=account.id, properties=props)

    @storage_errors
    def get_principals(self, profile: Profile) -> List[str]:
        return self._group_ids(profile.id)

    @storage_errors
    def get_members(self, group: Group) -> List[str]:
        return self._member_ids(group.id)

    def _can_view(self, account_id: str) -> bool:
        if account_id == self.viewer_id:
            return True
        edge = self.session.get(Connection, (self.viewer_id, account_id))
        return edge is not None and edge.state == ConnectionState.ACCEPTED.value

    def _group_ids(self, member_id: str) -> List[str]:
        rows = (
            self.session.query(Membership.group_id)
            .filter_by(member_id=member_id)
            .order_by(Membership.group_id)
            .all()
        )
        return [row.group_id for row in rows]

    def _member_ids(self, group_id: str) -> List[str]:
        rows = (
            self.session.query(Membership.member_id)
            .filter_by(group_id=group_id)
            .order_by(Membership.member_id)
            .all()
        )
        return [row.member_id for row in rows]


class SqlConnectionService:
    def __init__(self, session):
        self.session = session

    @storage_errors
    def get_connected_users(
        self, requester_id: str, state: ConnectionState = ConnectionState.ACCEPTED
    ) -> List[str]:
        rows = (
            self.session.query(Connection.target_id)
            .filter_by(owner_id=requester_id, state=ConnectionState(state).value)
            .order_by(Connection.created_at, Connection.target_id)
            .all()
        )
        return [row.target_id for row in rows]


def load_directory(seed_path: Path, session) -> Dict[str, int]:
    """
    Load accounts, memberships and connections from a JSON seed file.

    Existing rows with the same key are replaced.

    Returns:
        Counts of rows written per table
    """
    try:
        with seed_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError
        raise CallerContractError(f"Seed file {seed_path} is not valid JSON: {e}") from e

    errors = validate_seed(data)
    if errors:
        raise CallerContractError(f"Invalid seed file {seed_path}: " + "; ".join(errors))

    counts = {"accounts": 0, "memberships": 0, "connections": 0}
    try:
        for entry in data.get("accounts", []):
            account = Account(
                id=entry["id"],
                kind=entry.get("kind", USER),
                private=bool(entry.get("private", False)),
            )
            for key, column in PROFILE_COLUMNS.items():
                setattr(account, column, entry.get(key))
            session.merge(account)
            counts["accounts"] += 1

        for entry in data.get("memberships", []):
            session.merge(Membership(group_id=entry["group"], member_id=entry["member"]))
            counts["memberships"] += 1

        for entry in data.get("connections", []):
            state = entry.get("state", ConnectionState.ACCEPTED.value)
            session.merge(Connection(owner_id=entry["owner"], target_id=entry["target"], state=state))
            counts["connections"] += 1

        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageUnavailable(f"Failed to load seed {seed_path}: {e}") from e

    logger.info(f"Loaded directory seed from {seed_path}", **counts)
    return counts
