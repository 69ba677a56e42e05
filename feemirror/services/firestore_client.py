"""
Read-only Firestore REST client.

The desktop app publishes its collections to Cloud Firestore. The mirror
only ever lists whole collections, so this client covers exactly that:
paginated `documents.list` calls and decoding of Firestore's typed values
into plain Python structures shaped like the documents the app wrote.
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Optional

import httpx

from feemirror.config import settings
from feemirror.core.logging import get_logger

logger = get_logger(__name__)


class FirestoreError(Exception):
    """Listing a collection failed (transport, HTTP status or payload)."""


def decode_value(value: Any) -> Any:
    """Decode one Firestore `Value` object. Unknown value kinds decode to None."""
    if not isinstance(value, Mapping):
        return None
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        # int64 values travel as strings
        try:
            return int(value["integerValue"])
        except (TypeError, ValueError):
            return None
    if "doubleValue" in value:
        try:
            return float(value["doubleValue"])
        except (TypeError, ValueError):
            return None
    if "timestampValue" in value:
        return value["timestampValue"]
    if "stringValue" in value:
        return value["stringValue"]
    if "bytesValue" in value:
        return value["bytesValue"]
    if "referenceValue" in value:
        return value["referenceValue"]
    if "geoPointValue" in value:
        point = value["geoPointValue"] or {}
        return {"latitude": point.get("latitude"), "longitude": point.get("longitude")}
    if "arrayValue" in value:
        return [decode_value(item) for item in (value["arrayValue"] or {}).get("values", [])]
    if "mapValue" in value:
        return decode_fields((value["mapValue"] or {}).get("fields", {}))
    logger.debug("Unknown Firestore value kind", extra={"keys": list(value.keys())})
    return None


def decode_fields(fields: Any) -> Dict[str, Any]:
    if not isinstance(fields, Mapping):
        return {}
    return {key: decode_value(item) for key, item in fields.items()}


def decode_document(document: Mapping) -> Dict[str, Any]:
    """A document becomes {"id": <last path segment>, **fields}; a stored `id` field wins."""
    name = document.get("name") or ""
    return {"id": name.rsplit("/", 1)[-1], **decode_fields(document.get("fields"))}


class FirestoreClient:
    """Lists collections of one Firestore database over the REST API"""

    def __init__(
        self,
        project_id: str,
        api_key: str = "",
        base_url: str = "https://firestore.googleapis.com/v1",
        page_size: int = 300,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not project_id:
            raise ValueError("Firestore project id is required")
        self.project_id = project_id
        self.page_size = page_size
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/projects/{project_id}/databases/(default)/documents",
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls) -> "FirestoreClient":
        return cls(
            project_id=settings.FIRESTORE_PROJECT_ID,
            api_key=settings.FIRESTORE_API_KEY,
            base_url=settings.FIRESTORE_BASE_URL,
            page_size=settings.FIRESTORE_PAGE_SIZE,
            timeout=settings.FIRESTORE_TIMEOUT,
        )

    async def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        """
        Fetch every document of a collection, following pagination.

        Raises:
            FirestoreError: on transport errors, non-2xx responses or a payload
                that is not a JSON object
        """
        documents: List[Dict[str, Any]] = []
        page_token: Optional[str] = None
        while True:
            params: Dict[str, Any] = {"pageSize": self.page_size}
            if self._api_key:
                params["key"] = self._api_key
            if page_token:
                params["pageToken"] = page_token

            try:
                response = await self._client.get(f"/{collection}", params=params)
                response.raise_for_status()
                payload = response.json()
            except httpx.HTTPError as exc:
                raise FirestoreError(f"Failed to list {collection}: {exc}") from exc
            except ValueError as exc:
                raise FirestoreError(f"Invalid JSON listing {collection}") from exc
            if not isinstance(payload, Mapping):
                raise FirestoreError(f"Unexpected payload listing {collection}")

            for document in payload.get("documents") or []:
                if isinstance(document, Mapping):
                    documents.append(decode_document(document))

            page_token = payload.get("nextPageToken")
            if not page_token:
                break

        logger.debug("Listed collection", extra={"collection": collection, "document_count": len(documents)})
        return documents

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "FirestoreClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
