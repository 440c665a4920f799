"""
Error taxonomy for related-people feed assembly.

Only CallerContractError and FeedAssemblyError cross the run boundary.
AuthorizationDenied is caught by the assembler and turns into a partial
result; StorageUnavailable is raised by adapters and wrapped by the
assembler into FeedAssemblyError.
"""


class RelatedFeedError(Exception):
    """Base class for all feed errors."""
    pass


class CallerContractError(RelatedFeedError, ValueError):
    """Raised when an upstream contract is broken (missing or empty id, bad policy)."""
    pass


class RequesterNotFound(CallerContractError):
    """Raised when the requesting account cannot be resolved."""

    def __init__(self, requester_id: str):
        super().__init__(f"Requester not found: {requester_id}")
        self.requester_id = requester_id


class AuthorizationDenied(RelatedFeedError):
    """Raised by a collaborator when the requester may not read something."""
    pass


class StorageUnavailable(RelatedFeedError):
    """Raised by a collaborator when its backend fails."""
    pass


class FeedAssemblyError(RelatedFeedError, RuntimeError):
    """Run-level failure; no partial results are returned."""
    pass
