"""
Data model for related-people feed assembly.

CandidateResult is what a search source yields. Authorizable, Profile and
Group are what a directory resolves ids to. RenderedRecord is one unit of
output.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class CandidateKind(str, Enum):
    """Closed set of candidate kinds a search result can carry."""

    CONTACT_RECORD = "sakai/contact"
    RAW_ENTITY_RECORD = "authorizable"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def from_resource_type(cls, resource_type: Optional[str]) -> "CandidateKind":
        if resource_type == cls.CONTACT_RECORD.value:
            return cls.CONTACT_RECORD
        if resource_type == cls.RAW_ENTITY_RECORD.value:
            return cls.RAW_ENTITY_RECORD
        return cls.UNRECOGNIZED


class ConnectionState(str, Enum):
    ACCEPTED = "ACCEPTED"
    PENDING = "PENDING"
    INVITED = "INVITED"
    BLOCKED = "BLOCKED"
    IGNORED = "IGNORED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class CandidateResult:
    """One item of the primary ranked stream."""

    resource_type: Optional[str]
    path: str
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> CandidateKind:
        return CandidateKind.from_resource_type(self.resource_type)


@dataclass(frozen=True)
class Authorizable:
    id: str
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Profile(Authorizable):
    """A user account. `principals` lists the ids of groups it belongs to."""

    principals: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Group(Authorizable):
    members: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RenderedRecord:
    target: str
    profile: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"target": self.target, "profile": dict(self.profile)}
