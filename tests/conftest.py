"""
Pytest configuration and shared fixtures.
"""

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest
import requests

from relatedfeed.errors import AuthorizationDenied, StorageUnavailable
from relatedfeed.ledger import DedupLedger
from relatedfeed.logger import StructuredLogger
from relatedfeed.models import CandidateResult, ConnectionState, Group, Profile
from relatedfeed.renderer import EntityRenderer
from relatedfeed.services import BasicProfileFormatter

REQUESTER = "alice"


def contact(user_id: str, owner: str = REQUESTER) -> CandidateResult:
    """A contact record stored under the owner's contact folder."""
    return CandidateResult(
        resource_type="sakai/contact",
        path=f"a:{owner}/contacts/{user_id}",
        properties={"sakai:state": "ACCEPTED"},
    )


def entity(user_id: str) -> CandidateResult:
    return CandidateResult(resource_type="authorizable", path=user_id, properties={"type": "u"})


def person(user_id: str, principals=(), **props) -> Profile:
    props.setdefault("firstName", user_id.capitalize())
    props.setdefault("lastName", "Example")
    return Profile(id=user_id, properties=props, principals=tuple(principals))


class FakeDirectory:
    """In-memory directory that records every call it receives."""

    def __init__(self, profiles=(), groups=(), deny: Iterable[str] = (), fail: Iterable[str] = ()):
        self.entries = {}
        for p in profiles:
            self.entries[p.id] = p
        for g in groups:
            self.entries[g.id] = g
        self.deny = set(deny)
        self.fail = set(fail)
        self.calls: List[tuple] = []

    def add_people(self, *user_ids: str) -> None:
        for user_id in user_ids:
            self.entries.setdefault(user_id, person(user_id))

    def find_authorizable(self, authorizable_id):
        self.calls.append(("find_authorizable", authorizable_id))
        if authorizable_id in self.deny:
            raise AuthorizationDenied(f"denied: {authorizable_id}")
        if authorizable_id in self.fail:
            raise StorageUnavailable(f"backend down: {authorizable_id}")
        return self.entries.get(authorizable_id)

    def get_principals(self, profile):
        self.calls.append(("get_principals", profile.id))
        return list(profile.principals)

    def get_members(self, group):
        self.calls.append(("get_members", group.id))
        return list(group.members)

    def called(self, method: str) -> List[str]:
        return [arg for name, arg in self.calls if name == method]


class FakeConnections:
    def __init__(self, connected: Optional[Dict[str, List[str]]] = None, deny: bool = False):
        self.connected = connected or {}
        self.deny = deny
        self.calls: List[tuple] = []

    def get_connected_users(self, requester_id, state=ConnectionState.ACCEPTED):
        self.calls.append((requester_id, state))
        if self.deny:
            raise AuthorizationDenied("connections hidden")
        return list(self.connected.get(requester_id, []))


class ListSearchSource:
    """Yields the given results lazily; optionally raises once `raise_after` items were pulled."""

    def __init__(self, results: Iterable[CandidateResult], raise_after: Optional[int] = None, error=None):
        self.results = list(results)
        self.raise_after = raise_after
        self.error = error or AuthorizationDenied("search denied")
        self.pulled = 0
        self.criteria = None

    def query(self, criteria):
        self.criteria = dict(criteria)
        for result in self.results:
            if self.raise_after is not None and self.pulled >= self.raise_after:
                raise self.error
            self.pulled += 1
            yield result
        if self.raise_after is not None and self.pulled >= self.raise_after:
            raise self.error



class FakeResponse:
    """Stands in for requests.Response; a None payload is an unparseable body."""

    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return self.payload


class FakeSession:
    """Serves one response per request, in order, and records the params."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append(dict(params))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def page(docs, num_found):
    return FakeResponse({"response": {"numFound": num_found, "docs": docs}})

@pytest.fixture
def feed_logger(tmp_path) -> StructuredLogger:
    """Debug-level logger writing only to a file under tmp_path."""
    return StructuredLogger(
        name="relatedfeed-test",
        level="DEBUG",
        log_dir=tmp_path / "logs",
        enable_console=False,
    )


@pytest.fixture
def read_log(tmp_path):
    def _read() -> str:
        files = list((tmp_path / "logs").glob("*.log"))
        return "".join(f.read_text(encoding="utf-8") for f in files)
    return _read


@pytest.fixture
def two_groups_directory() -> FakeDirectory:
    """alice is in two groups with 20 distinct members between them (2 shared)."""
    math_members = [f"m{i:02d}" for i in range(12)]
    art_members = [f"m{i:02d}" for i in range(10, 20)]
    groups = [
        Group(id="g-math", members=tuple(math_members)),
        Group(id="g-art", members=tuple(art_members)),
    ]
    directory = FakeDirectory(
        profiles=[person(REQUESTER, principals=["g-math", "g-art", "everyone"])],
        groups=groups,
    )
    directory.add_people(*math_members, *art_members)
    return directory


@pytest.fixture
def make_renderer(feed_logger):
    def _make(directory, connected=(), requester=REQUESTER) -> EntityRenderer:
        ledger = DedupLedger(requester, connected)
        return EntityRenderer(directory, BasicProfileFormatter(), ledger, feed_logger)
    return _make


@pytest.fixture
def seed_file(tmp_path) -> Path:
    data = {
        "accounts": [
            {"id": "alice", "firstName": "Alice", "lastName": "Adams", "email": "alice@example.edu"},
            {"id": "bob", "firstName": "Bob", "lastName": "Brown"},
            {"id": "carol", "firstName": "Carol", "picture": "carol.jpg"},
            {"id": "dave", "firstName": "Dave", "private": True},
            {"id": "erin", "firstName": "Erin"},
            {"id": "g-chem", "kind": "group"},
            {"id": "g-bio", "kind": "group"},
        ],
        "memberships": [
            {"group": "g-chem", "member": "alice"},
            {"group": "g-chem", "member": "bob"},
            {"group": "g-chem", "member": "carol"},
            {"group": "g-bio", "member": "alice"},
            {"group": "g-bio", "member": "erin"},
        ],
        "connections": [
            {"owner": "alice", "target": "bob", "state": "ACCEPTED"},
            {"owner": "alice", "target": "erin", "state": "PENDING"},
        ],
    }
    path = tmp_path / "directory.json"
    path.write_text(json.dumps(data, indent=2))
    return path
