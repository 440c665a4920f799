from typing import List, Optional

from .errors import CallerContractError
from .ledger import DedupLedger
from .logger import StructuredLogger
from .models import Profile, RenderedRecord
from .services import DirectoryService, ProfileFormatter


class EntityRenderer:
    """
    Turns a candidate id into a RenderedRecord when it is eligible.

    Records are appended to `records` in emission order. Each successful
    render marks the id processed exactly once.
    """

    def __init__(
        self,
        directory: DirectoryService,
        formatter: ProfileFormatter,
        ledger: DedupLedger,
        logger: StructuredLogger,
    ):
        self.directory = directory
        self.formatter = formatter
        self.ledger = ledger
        self.logger = logger
        self.records: List[RenderedRecord] = []

    def render(self, entity_id: Optional[str], phase: str = "primary") -> Optional[RenderedRecord]:
        if not entity_id:
            raise CallerContractError(f"Candidate id must be a non-empty string, got {entity_id!r}")

        self.logger.record_candidate()
        if not self.ledger.is_eligible(entity_id):
            return None

        entity = self.directory.find_authorizable(entity_id)
        if not isinstance(entity, Profile):
            # Unknown, deleted, or a group rather than a person
            self.logger.debug("Skipping unresolvable candidate", target=entity_id, phase=phase)
            return None

        record = RenderedRecord(target=entity_id, profile=self.formatter.get_public_fields(entity))
        self.records.append(record)
        self.ledger.mark_processed(entity_id)
        self.logger.record_emitted(phase)
        return record
