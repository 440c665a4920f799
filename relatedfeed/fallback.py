"""
Fallback population from the requester's groups.

When the ranked stream runs dry before the page is full, the feed is
filled with people who share a group with the requester. Both the group
order and the pooled member order are shuffled so that repeated requests
do not keep showing the same filler people, and no single group is
systematically favoured.
"""

import random
from typing import List, Optional, Set

from .errors import RequesterNotFound
from .logger import StructuredLogger
from .models import Group, Profile
from .renderer import EntityRenderer
from .services import DirectoryService


class FallbackCandidateCollector:
    def __init__(
        self,
        directory: DirectoryService,
        renderer: EntityRenderer,
        logger: StructuredLogger,
        rng: Optional[random.Random] = None,
    ):
        self.directory = directory
        self.renderer = renderer
        self.logger = logger
        self.rng = rng if rng is not None else random.Random()

    def collect(self, requester_id: str, quota: int) -> Set[str]:
        """
        Render group-mates of the requester until the quota is met.

        Returns the pooled candidate set that was drawn from.

        Raises:
            RequesterNotFound: If the requester does not resolve to a profile
        """
        requester = self.directory.find_authorizable(requester_id)
        if not isinstance(requester, Profile):
            raise RequesterNotFound(requester_id)

        principals = list(self.directory.get_principals(requester))
        if not principals:
            self.logger.debug("Requester has no group memberships", requester=requester_id)
            return set()

        related_users = self._pool_members(principals, quota)

        candidates = sorted(related_users)
        self.rng.shuffle(candidates)
        ledger = self.renderer.ledger
        for candidate in candidates:
            if len(ledger) >= quota:
                break
            self.renderer.render(candidate, phase="fallback")

        self.logger.debug(
            "Fallback pool drawn",
            requester=requester_id,
            groups=len(principals),
            pool_size=len(related_users),
            emitted=len(ledger),
        )
        return related_users

    def _pool_members(self, principals: List[str], quota: int) -> Set[str]:
        shuffled = list(principals)
        self.rng.shuffle(shuffled)

        ledger = self.renderer.ledger
        related_users: Set[str] = set()
        for principal in shuffled:
            if len(ledger) >= quota:
                break
            group = self.directory.find_authorizable(principal)
            if not isinstance(group, Group):
                continue
            related_users.update(m for m in self.directory.get_members(group) if m)
        return related_users
