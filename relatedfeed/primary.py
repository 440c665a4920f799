from typing import Iterable, Optional

from .errors import CallerContractError
from .logger import StructuredLogger
from .models import CandidateKind, CandidateResult
from .renderer import EntityRenderer

_EXHAUSTED = object()


def derive_entity_id(result: CandidateResult) -> Optional[str]:
    """
    Derive the entity id a search result points at.

    Contact records are stored under the owner's contact folder, so the id
    is the last path segment. Raw entity records are the entity locator
    itself. Unrecognized kinds yield None.
    """
    kind = result.kind
    if kind is CandidateKind.CONTACT_RECORD:
        entity_id = result.path.rsplit("/", 1)[-1]
    elif kind is CandidateKind.RAW_ENTITY_RECORD:
        entity_id = result.path
    elif kind is CandidateKind.UNRECOGNIZED:
        return None
    else:
        raise AssertionError(f"Unhandled candidate kind: {kind}")

    if not entity_id:
        raise CallerContractError(f"Missing entity id in {kind.value} result path: {result.path!r}")
    return entity_id


class PrimaryStreamConsumer:
    """Pulls ranked results one at a time until the quota is met or the stream ends."""

    def __init__(self, renderer: EntityRenderer, logger: StructuredLogger):
        self.renderer = renderer
        self.logger = logger

    def consume(self, results: Iterable[CandidateResult], quota: int) -> bool:
        """
        Returns True when the stream was exhausted, False when the quota
        stopped consumption first.
        """
        ledger = self.renderer.ledger
        iterator = iter(results)
        while len(ledger) < quota:
            result = next(iterator, _EXHAUSTED)
            if result is _EXHAUSTED:
                return True

            entity_id = derive_entity_id(result)
            if entity_id is None:
                self.logger.warning(
                    "No handler for this resource type",
                    resource_type=result.resource_type,
                    path=result.path,
                    properties=result.properties,
                )
                self.logger.record_unrecognized(result.resource_type)
                continue

            self.renderer.render(entity_id, phase="primary")
        return False
