from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple
import json

import requests

from .errors import AuthorizationDenied, CallerContractError, StorageUnavailable
from .logger import get_logger
from .models import CandidateResult
from .schema import validate_result

logger = get_logger()

DEFAULT_ITEMS_PER_PAGE = 25
RESERVED_FIELDS = ("path", "resourceType")


def _first_value(value: Any) -> Any:
    # Multi-valued index fields come back as lists
    if isinstance(value, list):
        return value[0] if value else None
    return value


def doc_to_result(doc: Dict[str, Any]) -> CandidateResult:
    """
    Convert one search document into a CandidateResult.

    Raises:
        CallerContractError: If the document has no usable path
    """
    if isinstance(doc, dict):
        doc = dict(doc)
        for key in RESERVED_FIELDS:
            if key in doc:
                doc[key] = _first_value(doc[key])
    errors = validate_result(doc)
    if errors:
        raise CallerContractError(f"Malformed search result: {'; '.join(errors)}")

    properties = {k: v for k, v in doc.items() if k not in RESERVED_FIELDS}
    return CandidateResult(resource_type=doc.get("resourceType"), path=doc["path"], properties=properties)


class HttpSearchSource:
    """
    Lazily pages through a Solr-style JSON search endpoint.

    A page is only requested once the consumer has pulled every result of
    the previous one, so stopping early never fetches more than needed.
    """

    def __init__(
        self,
        endpoint: str,
        items_per_page: int = DEFAULT_ITEMS_PER_PAGE,
        timeout: float = 20,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = endpoint
        self.items_per_page = items_per_page
        self.timeout = timeout
        self.session = session or requests.Session()

    def query(self, criteria: Mapping[str, Any]) -> Iterator[CandidateResult]:
        start = 0
        while True:
            docs, num_found = self._fetch_page(criteria, start)
            if not docs:
                return
            for doc in docs:
                yield doc_to_result(doc)
            start += len(docs)
            if start >= num_found:
                return

    def _fetch_page(self, criteria: Mapping[str, Any], start: int) -> Tuple[List[Any], int]:
        params = {"q": "*:*", "wt": "json"}
        params.update(criteria)
        params["start"] = start
        params["rows"] = self.items_per_page

        try:
            r = self.session.get(self.endpoint, params=params, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status in (401, 403):
                raise AuthorizationDenied(f"Search request denied ({status}): {self.endpoint}") from e
            logger.error("Search request failed", url=self.endpoint, status=status)
            raise StorageUnavailable(f"Search request failed ({status}): {self.endpoint}") from e
        except requests.exceptions.Timeout as e:
            logger.warning("Search request timed out", url=self.endpoint)
            raise StorageUnavailable(f"Search request timed out: {self.endpoint}") from e
        except requests.exceptions.RequestException as e:
            logger.error("Search request error", url=self.endpoint, error=str(e))
            raise StorageUnavailable(f"Search request error: {e}") from e
        except ValueError as e:
            raise StorageUnavailable(f"Search response is not JSON: {self.endpoint}") from e

        response = data.get("response") if isinstance(data, dict) else None
        if not isinstance(response, dict):
            logger.error("Search response has no response object", url=self.endpoint)
            raise StorageUnavailable(f"Malformed search response from {self.endpoint}")

        docs = response.get("docs") or []
        if not isinstance(docs, list):
            raise StorageUnavailable(f"Search response 'docs' is not a list: {self.endpoint}")
        try:
            num_found = int(response.get("numFound", 0))
        except (TypeError, ValueError) as e:
            raise StorageUnavailable(
                f"Search response has invalid numFound {response.get('numFound')!r}: {self.endpoint}"
            ) from e
        return docs, num_found


class JsonFileSearchSource:
    """Serves search documents from a local JSON file, in file order."""

    def __init__(self, path: Path):
        self.path = path

    def query(self, criteria: Mapping[str, Any]) -> Iterator[CandidateResult]:
        for doc in self._load_docs():
            yield doc_to_result(doc)

    def _load_docs(self) -> List[Any]:
        # UnicodeDecodeError and JSONDecodeError are both ValueErrors
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageUnavailable(f"Cannot read search results from {self.path}: {e}") from e

        if isinstance(data, dict):
            response = data.get("response")
            data = response.get("docs", []) if isinstance(response, dict) else None
        if not isinstance(data, list):
            raise StorageUnavailable(f"Search results in {self.path} are not a list of documents")
        return data
