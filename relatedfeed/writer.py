import json
from typing import Iterable, TextIO

from .models import RenderedRecord


class FeedWriter:
    """
    Streams a paginated search response as JSON:

        {"items": 25, "total": 3, "results": [{"target": ..., "profile": {...}}, ...]}

    Result objects are written one at a time in emission order.
    """

    def __init__(self, stream: TextIO, indent: bool = False):
        self.stream = stream
        self.indent = indent

    def write_results(self, records: Iterable[RenderedRecord], items_per_page: int) -> int:
        records = list(records)
        self.stream.write(f'{{"items": {int(items_per_page)}, "total": {len(records)}, "results": [')
        for i, record in enumerate(records):
            if i:
                self.stream.write(",")
            if self.indent:
                self.stream.write("\n  ")
            self.stream.write(json.dumps(record.to_dict(), ensure_ascii=False, sort_keys=False))
        if self.indent and records:
            self.stream.write("\n")
        self.stream.write("]}\n")
        return len(records)
