"""
Tests for writer.py - paginated JSON response output.
"""

import io
import json

from relatedfeed.models import RenderedRecord
from relatedfeed.writer import FeedWriter


class TestFeedWriter:
    """Test the JSON feed writer."""

    def test_writes_records_in_emission_order(self):
        """Test that records are written in the order they were rendered."""
        records = [
            RenderedRecord(target="bob", profile={"userid": "bob", "firstName": "Bob"}),
            RenderedRecord(target="carol", profile={"userid": "carol", "email": "carol@example.edu"}),
        ]
        out = io.StringIO()

        written = FeedWriter(out).write_results(records, items_per_page=11)

        assert written == 2
        payload = json.loads(out.getvalue())
        assert payload["items"] == 11
        assert payload["total"] == 2
        assert [r["target"] for r in payload["results"]] == ["bob", "carol"]
        assert payload["results"][1]["profile"] == {"userid": "carol", "email": "carol@example.edu"}

    def test_empty_feed_is_valid_json(self):
        """Test that an empty feed still writes a valid document."""
        out = io.StringIO()
        FeedWriter(out, indent=True).write_results([], items_per_page=25)
        assert json.loads(out.getvalue()) == {"items": 25, "total": 0, "results": []}

    def test_pretty_output_puts_one_result_per_line(self):
        """Test that pretty output puts each result on its own line."""
        records = [RenderedRecord(target=f"u{i}", profile={"userid": f"u{i}"}) for i in range(3)]
        out = io.StringIO()

        FeedWriter(out, indent=True).write_results(records, items_per_page=3)

        lines = out.getvalue().splitlines()
        assert len(lines) == 5
        assert json.loads(out.getvalue())["total"] == 3

    def test_accepts_a_generator(self):
        """Test that records may be passed as a generator."""
        out = io.StringIO()
        records = (RenderedRecord(target=t, profile={}) for t in ["a", "b"])
        assert FeedWriter(out).write_results(records, items_per_page=2) == 2
