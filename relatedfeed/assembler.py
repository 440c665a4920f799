"""
Related-people feed assembly.

Builds a deduplicated, size-bounded list of people related to a
requester: first from a ranked search stream, then from members of the
requester's groups when the stream runs dry. Authorization denials end
the run early with whatever was collected; backend failures abort it.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional

from .errors import AuthorizationDenied, CallerContractError, FeedAssemblyError, StorageUnavailable
from .fallback import FallbackCandidateCollector
from .ledger import DedupLedger
from .logger import StructuredLogger, get_logger
from .models import ConnectionState, RenderedRecord
from .primary import PrimaryStreamConsumer
from .renderer import EntityRenderer
from .services import (
    BasicProfileFormatter,
    ConnectionService,
    DirectoryService,
    ProfileFormatter,
    SearchSource,
)

DEFAULT_PAGED_ITEMS = 25
# "These go to eleven"
MINIMUM_ACCEPTABLE = 11


class AssemblyState(str, Enum):
    CONSUMING_PRIMARY = "consuming_primary"
    CONSUMING_FALLBACK = "consuming_fallback"
    DONE = "done"


@dataclass(frozen=True)
class FeedPolicy:
    """
    Page size and shortfall threshold. The two are independent: the
    threshold only decides when a short feed gets logged.
    """

    default_quota: int = DEFAULT_PAGED_ITEMS
    minimum_acceptable: int = MINIMUM_ACCEPTABLE

    def __post_init__(self):
        if not isinstance(self.default_quota, int) or self.default_quota <= 0:
            raise CallerContractError(f"default_quota must be a positive integer, got {self.default_quota!r}")
        if not isinstance(self.minimum_acceptable, int) or self.minimum_acceptable < 0:
            raise CallerContractError(
                f"minimum_acceptable must be a non-negative integer, got {self.minimum_acceptable!r}"
            )

    def resolve_quota(self, items_per_page: Optional[int] = None) -> int:
        if items_per_page is None:
            return self.default_quota
        if not isinstance(items_per_page, int) or items_per_page <= 0:
            raise CallerContractError(f"items_per_page must be a positive integer, got {items_per_page!r}")
        return items_per_page


@dataclass
class FeedResult:
    """Outcome of one run. `denied` is set when an authorization denial cut it short."""

    requester_id: str
    quota: int
    records: List[RenderedRecord] = field(default_factory=list)
    states: List[AssemblyState] = field(default_factory=list)
    denied: Optional[AuthorizationDenied] = None
    shortfall: bool = False

    @property
    def state(self) -> Optional[AssemblyState]:
        return self.states[-1] if self.states else None

    @property
    def complete(self) -> bool:
        return self.denied is None

    @property
    def targets(self) -> List[str]:
        return [r.target for r in self.records]

    def __len__(self) -> int:
        return len(self.records)


class FeedAssembler:
    def __init__(
        self,
        search: SearchSource,
        connections: ConnectionService,
        directory: DirectoryService,
        formatter: Optional[ProfileFormatter] = None,
        policy: Optional[FeedPolicy] = None,
        logger: Optional[StructuredLogger] = None,
        rng: Optional[random.Random] = None,
    ):
        self.search = search
        self.connections = connections
        self.directory = directory
        self.formatter = formatter if formatter is not None else BasicProfileFormatter()
        self.policy = policy if policy is not None else FeedPolicy()
        self.logger = logger if logger is not None else get_logger()
        self.rng = rng

    def assemble(
        self,
        requester_id: str,
        criteria: Optional[Mapping[str, Any]] = None,
        items_per_page: Optional[int] = None,
    ) -> FeedResult:
        """
        Run one assembly for `requester_id`.

        Raises:
            CallerContractError: On a missing requester or a malformed result
            FeedAssemblyError: When a storage or search backend fails
        """
        if not requester_id:
            raise CallerContractError("requester_id must be a non-empty string")

        quota = self.policy.resolve_quota(items_per_page)
        result = FeedResult(requester_id=requester_id, quota=quota)
        self.logger.record_run()

        query = {"userid": requester_id}
        if criteria:
            query.update(criteria)

        renderer: Optional[EntityRenderer] = None
        try:
            connected = self.connections.get_connected_users(requester_id, ConnectionState.ACCEPTED)
            ledger = DedupLedger(requester_id, connected)
            renderer = EntityRenderer(self.directory, self.formatter, ledger, self.logger)

            result.states.append(AssemblyState.CONSUMING_PRIMARY)
            consumer = PrimaryStreamConsumer(renderer, self.logger)
            exhausted = consumer.consume(self.search.query(query), quota)

            if exhausted and len(ledger) < quota:
                result.states.append(AssemblyState.CONSUMING_FALLBACK)
                collector = FallbackCandidateCollector(self.directory, renderer, self.logger, rng=self.rng)
                collector.collect(requester_id, quota)
        except AuthorizationDenied as e:
            self.logger.record_access_denied()
            self.logger.debug(f"Access denied, returning partial feed: {e}", requester=requester_id)
            result.denied = e
        except StorageUnavailable as e:
            self.logger.record_failure()
            self.logger.error("Feed assembly failed", requester=requester_id, error=str(e))
            raise FeedAssemblyError(f"Feed assembly failed for {requester_id}: {e}") from e

        if renderer is not None:
            result.records = list(renderer.records)
        result.states.append(AssemblyState.DONE)

        if len(result.records) < self.policy.minimum_acceptable:
            result.shortfall = True
            self.logger.record_shortfall()
            self.logger.info(
                f"Feed shortfall: expected at least {self.policy.minimum_acceptable} results, "
                f"got {len(result.records)}",
                requester=requester_id,
                quota=quota,
            )

        return result
