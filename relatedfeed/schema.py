from typing import Any, Dict, List

from .models import ConnectionState

ACCOUNT_KINDS = {"user", "group"}
ACCOUNT_STR_FIELDS = [
    "firstName",
    "lastName",
    "preferredName",
    "email",
    "picture",
    "department",
]
CONNECTION_STATES = {s.value for s in ConnectionState}


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_result(doc: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for one search document.
    Empty list means valid. A missing resourceType is allowed; such
    documents are skipped as unrecognized.
    """
    errors: List[str] = []
    if not isinstance(doc, dict):
        return [f"Search document must be an object, got {type(doc).__name__}"]

    if "path" not in doc:
        errors.append("Missing required field: path")
    elif not _is_non_empty_str(doc["path"]):
        errors.append("Field 'path' must be a non-empty string")

    if "resourceType" in doc and not isinstance(doc["resourceType"], str):
        errors.append("Field 'resourceType' must be a string if provided")

    return errors


def _entries(data: Dict[str, Any], section: str, errors: List[str]) -> List[Any]:
    """Return the entries of a seed section, recording an error if it is not a list."""
    entries = data.get(section, [])
    if not isinstance(entries, list):
        errors.append(f"Field '{section}' must be a list")
        return []
    return entries


def validate_seed(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for a directory seed.
    Empty list means valid.
    """
    errors: List[str] = []
    if not isinstance(data, dict):
        return ["Seed must be a JSON object"]

    for i, account in enumerate(_entries(data, "accounts", errors)):
        if not isinstance(account, dict):
            errors.append(f"accounts[{i}]: must be an object")
            continue
        if not _is_non_empty_str(account.get("id")):
            errors.append(f"accounts[{i}]: field 'id' must be a non-empty string")
        kind = account.get("kind", "user")
        if not isinstance(kind, str) or kind not in ACCOUNT_KINDS:
            errors.append(f"accounts[{i}]: unknown kind {kind!r}")
        for f in ACCOUNT_STR_FIELDS:
            if f in account and account[f] is not None and not isinstance(account[f], str):
                errors.append(f"accounts[{i}]: field '{f}' must be a string if provided")

    for i, membership in enumerate(_entries(data, "memberships", errors)):
        if not isinstance(membership, dict):
            errors.append(f"memberships[{i}]: must be an object")
            continue
        for f in ("group", "member"):
            if not _is_non_empty_str(membership.get(f)):
                errors.append(f"memberships[{i}]: field '{f}' must be a non-empty string")

    for i, connection in enumerate(_entries(data, "connections", errors)):
        if not isinstance(connection, dict):
            errors.append(f"connections[{i}]: must be an object")
            continue
        for f in ("owner", "target"):
            if not _is_non_empty_str(connection.get(f)):
                errors.append(f"connections[{i}]: field '{f}' must be a non-empty string")
        state = connection.get("state", ConnectionState.ACCEPTED.value)
        if not isinstance(state, str) or state not in CONNECTION_STATES:
            errors.append(f"connections[{i}]: unknown state {state!r}")

    return errors
