from typing import Collection, Set


class DedupLedger:
    """
    Exclusion state for one assembly run.

    `connected` is the requester's accepted contacts, read-only for the run.
    `processed` grows as records are emitted and never shrinks.
    """

    def __init__(self, requester_id: str, connected: Collection[str]):
        self.requester_id = requester_id
        self.connected: Set[str] = set(connected)
        self.processed: Set[str] = set()

    def is_eligible(self, entity_id: str) -> bool:
        return is_eligible(entity_id, self.connected, self.processed, self.requester_id)

    def mark_processed(self, entity_id: str) -> None:
        mark_processed(entity_id, self.processed)

    def __len__(self) -> int:
        return len(self.processed)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self.processed


def is_eligible(
    entity_id: str,
    connected: Collection[str],
    processed: Collection[str],
    requester_id: str,
) -> bool:
    return entity_id != requester_id and entity_id not in connected and entity_id not in processed


def mark_processed(entity_id: str, processed: Set[str]) -> None:
    processed.add(entity_id)
