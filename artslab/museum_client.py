"""
HTTP client for the Metropolitan Museum collection API.

Searches the public collection for object ids and fetches object details,
translating them into gallery Records.  Used by Gallery.search() and
Gallery.populate_cache_if_empty().

Every failure (transport error, non-2xx status, bad payload) is logged and
degrades to "no data": the gallery always has a local fallback.  One
attempt per call, no retries.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Optional, Union
from urllib.parse import quote

import httpx

from .types import Record, normalize_id, tokenize_query

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://collectionapi.metmuseum.org/public/collection/v1/"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_CONCURRENCY = 10

# Characters JavaScript's encodeURIComponent leaves alone (besides alphanumerics)
_URI_COMPONENT_SAFE = "-_.!~*'()"

# Remote object field -> Record field.  The only place the two schemas meet.
REMOTE_FIELD_MAP: dict[str, str] = {
    "objectID": "id",
    "title": "title",
    "artistDisplayName": "artist",
    "accessionYear": "year",
    "medium": "medium",
    "primaryImage": "image_url",
    "primaryImageSmall": "thumbnail_url",
    "additionalImages": "additional_image_urls",
}


def encode_query(text: str) -> str:
    """Encode query text as the API's ``q`` parameter.

    Each token is percent-encoded on its own and tokens are joined with
    ``+``, so quoted phrases reach the API as single terms.
    """
    return "+".join(quote(token, safe=_URI_COMPONENT_SAFE) for token in tokenize_query(text))


def map_remote_object(payload: Any) -> Optional[Record]:
    """Translate a remote object payload into a Record.

    Returns None when the payload is empty, not an object, or has no id.
    """
    if not isinstance(payload, dict) or not payload:
        return None
    if payload.get("objectID") in (None, ""):
        return None

    fields = {
        local: payload[remote]
        for remote, local in REMOTE_FIELD_MAP.items()
        if remote in payload
    }
    try:
        return Record.from_dict(fields)
    except (ValueError, TypeError) as e:
        logger.warning("Malformed remote object %r: %s", payload.get("objectID"), e)
        return None


class MuseumClient:
    """Async HTTP client for the collection search and object APIs."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        # Relative request paths must resolve under the versioned prefix
        self._api_url = api_url.rstrip("/") + "/"
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))
        self._client = httpx.AsyncClient(
            base_url=self._api_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @property
    def api_url(self) -> str:
        return self._api_url

    async def search(self, query_text: str) -> list[str]:
        """GET search?q=...&hasImages=true -> list of object ids.

        A blank query returns [] without making a request.
        """
        try:
            encoded = encode_query(query_text)
        except UnicodeError as e:
            logger.warning("Cannot encode search query %r: %s", query_text, e)
            return []
        if not encoded:
            return []

        url = f"search?q={encoded}&hasImages=true"
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Failed to fetch data from %r: %s", self._api_url + url, e)
            return []

        if not isinstance(data, dict):
            logger.warning("Unexpected search response from %r: %r", self._api_url + url, data)
            return []
        logger.debug("Total objects found for %r: %s", query_text, data.get("total"))

        object_ids = data.get("objectIDs") or []
        if not isinstance(object_ids, list):
            logger.warning("Unexpected objectIDs in search response: %r", object_ids)
            return []

        ids = []
        for object_id in object_ids:
            try:
                ids.append(normalize_id(object_id))
            except ValueError:
                logger.warning("Ignoring invalid object id in search results: %r", object_id)
        return ids

    async def fetch(self, identifier: Union[str, int]) -> Optional[Record]:
        """GET objects/{id} -> Record, or None on any failure."""
        try:
            object_id = normalize_id(identifier)
            url = f"objects/{quote(object_id, safe='')}"
        except ValueError as e:
            logger.warning("Cannot fetch object %r: %s", identifier, e)
            return None
        try:
            async with self._semaphore:
                resp = await self._client.get(url)
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Failed to fetch data from %r: %s", self._api_url + url, e)
            return None

        record = map_remote_object(payload)
        if record is None:
            logger.warning("Empty or invalid object payload for %s", object_id)
        return record

    async def fetch_many(self, identifiers: Iterable[Union[str, int]]) -> list[Record]:
        """Fetch several objects concurrently.

        Results come back in request order; failed fetches are omitted.
        """
        results = await asyncio.gather(*(self.fetch(i) for i in identifiers))
        return [r for r in results if r is not None]

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "MuseumClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
