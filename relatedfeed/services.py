"""
Collaborator contracts consumed by the feed assembler.

Any object with the right methods satisfies these; the SQL-backed
implementations live in storage.py and the HTTP search source in
search_client.py.
"""

from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol

from .models import Authorizable, CandidateResult, ConnectionState, Group, Profile


class SearchSource(Protocol):
    def query(self, criteria: Mapping[str, Any]) -> Iterator[CandidateResult]:
        ...


class ConnectionService(Protocol):
    def get_connected_users(
        self, requester_id: str, state: ConnectionState = ConnectionState.ACCEPTED
    ) -> List[str]:
        ...


class DirectoryService(Protocol):
    def find_authorizable(self, authorizable_id: str) -> Optional[Authorizable]:
        ...

    def get_principals(self, profile: Profile) -> List[str]:
        ...

    def get_members(self, group: Group) -> List[str]:
        ...


class ProfileFormatter(Protocol):
    def get_public_fields(self, profile: Authorizable) -> Dict[str, Any]:
        ...


# Public profile fields, in output order
BASIC_PROFILE_FIELDS = [
    "firstName",
    "lastName",
    "preferredName",
    "email",
    "picture",
    "department",
]


class BasicProfileFormatter:
    """Projects an account onto the fixed set of public profile fields."""

    def __init__(self, fields: Optional[List[str]] = None):
        self.fields = list(fields) if fields is not None else list(BASIC_PROFILE_FIELDS)

    def get_public_fields(self, profile: Authorizable) -> Dict[str, Any]:
        public = {"userid": profile.id}
        for name in self.fields:
            value = profile.properties.get(name)
            if value is not None and value != "":
                public[name] = value
        return public
