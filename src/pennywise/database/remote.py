"""Record store backed by a hosted JSON record API."""

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pennywise.database.base import Database, check_collection, writable_fields
from pennywise.domain.errors import ConflictError, StoreUnavailableError

logger = logging.getLogger(__name__)

NOT_FOUND = object()


def _encode(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if hasattr(value, "value"):
        return value.value
    return value


def encode_record(fields: dict[str, Any]) -> dict[str, Any]:
    """Make a record JSON-serialisable (Decimal as string, dates as ISO-8601)."""
    return {key: _encode(value) for key, value in fields.items()}


class RemoteDatabase(Database):
    """Client for a hosted record store.

    The service exposes one resource per collection:

    - ``GET {base}/{collection}?field=value`` lists records
    - ``GET {base}/{collection}/{id}`` fetches one record
    - ``POST {base}/{collection}`` creates a record
    - ``PATCH {base}/{collection}/{id}`` merges fields (``If-Match: <version>``
      makes it a compare-and-set)
    - ``DELETE {base}/{collection}/{id}`` deletes a record

    Every response body is ``{"success": bool, "data": ..., "message": str}``.
    Records come back with JSON scalars; the mappers coerce them to domain types.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout_seconds: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    def connect(self) -> None:
        """Connect to the store."""
        # HTTP requests are stateless
        pass

    def disconnect(self) -> None:
        """Disconnect from the store."""
        pass

    def initialize_schema(self) -> None:
        """The hosted store owns its schema."""
        pass

    def _url(self, collection: str, record_id: Optional[int] = None, query: Optional[dict] = None) -> str:
        check_collection(collection)
        url = f"{self.base_url}/{collection}"
        if record_id is not None:
            url = f"{url}/{int(record_id)}"
        if query:
            url = f"{url}?{urllib.parse.urlencode(encode_record(query))}"
        return url

    def _request(
        self,
        method: str,
        url: str,
        payload: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """Send a request and return the ``data`` member of the response.

        Returns NOT_FOUND for HTTP 404.
        """
        request_headers = {"Accept": "application/json"}
        if self.api_key:
            request_headers["Authorization"] = f"Bearer {self.api_key}"
        data = None
        if payload is not None:
            data = json.dumps(encode_record(payload)).encode("utf-8")
            request_headers["Content-Type"] = "application/json"
        request_headers.update(headers or {})

        req = urllib.request.Request(url=url, data=data, headers=request_headers, method=method)
        logger.debug("Record store request %s %s", method, url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
                body = json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as exc:
            if exc.code == 404:
                return NOT_FOUND
            if exc.code == 409:
                raise ConflictError(f"Record store rejected {method} {url}: conflict") from exc
            logger.warning("Record store %s %s failed with HTTP %s", method, url, exc.code)
            raise StoreUnavailableError(f"Record store returned HTTP {exc.code}") from exc
        except (OSError, http.client.HTTPException, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Record store %s %s failed: %s", method, url, exc)
            raise StoreUnavailableError(f"Record store unavailable: {exc}") from exc

        if not isinstance(body, dict) or not body.get("success", False):
            message = body.get("message") if isinstance(body, dict) else None
            logger.warning("Record store %s %s unsuccessful: %s", method, url, message)
            raise StoreUnavailableError(message or "Record store returned an unsuccessful response")
        return body.get("data")

    def list_records(
        self,
        collection: str,
        filters: Optional[dict[str, Any]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[dict[str, Any]]:
        """List records with optional exact-match and date filters."""
        query = dict(filters or {})
        if start_date is not None:
            query["start_date"] = start_date
        if end_date is not None:
            query["end_date"] = end_date
        data = self._request("GET", self._url(collection, query=query))
        if data is NOT_FOUND or data is None:
            return []
        if not isinstance(data, list):
            raise StoreUnavailableError(f"Expected a list of {collection}, got {type(data).__name__}")
        return sorted((row for row in data if isinstance(row, dict)), key=lambda row: int(row["id"]))

    def get_record(self, collection: str, record_id: int) -> Optional[dict[str, Any]]:
        """Get record by ID."""
        data = self._request("GET", self._url(collection, record_id))
        return None if data is NOT_FOUND else data

    def create_record(self, collection: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Create a record; the service assigns id and version."""
        payload = writable_fields(fields)
        if "created_at" in fields:
            payload["created_at"] = fields["created_at"]
        data = self._request("POST", self._url(collection), payload=payload)
        if not isinstance(data, dict):
            raise StoreUnavailableError(f"Record store did not return the created {collection} record")
        return data

    def update_record(
        self,
        collection: str,
        record_id: int,
        fields: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Optional[dict[str, Any]]:
        """Merge fields into a record, optionally as a compare-and-set."""
        headers = {}
        if expected_version is not None:
            headers["If-Match"] = str(expected_version)
        data = self._request(
            "PATCH",
            self._url(collection, record_id),
            payload=writable_fields(fields),
            headers=headers,
        )
        return None if data is NOT_FOUND else data

    def delete_record(self, collection: str, record_id: int) -> bool:
        """Delete a record."""
        return self._request("DELETE", self._url(collection, record_id)) is not NOT_FOUND
