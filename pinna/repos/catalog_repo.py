import httpx
import logging
from typing import Any, Optional

from pinna.core.config import settings
from pinna.core.errors import FetchFailed, UploadError
from pinna.core.logger import logs
from pinna.models.capture_model import CapturedImage

class CatalogRepository:
    """
    Gateway to the remote place catalog.
    GET /places returns the full snapshot; saves go to /save (multipart)
    or /upload (JSON with a base64 image) depending on upload_mode.
    """
    def __init__(
        self,
        base_url: str = None,
        upload_mode: str = None,
        timeout: float = None,
        upload_timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.CATALOG_BASE_URL).rstrip("/")
        self.upload_mode = (upload_mode or settings.UPLOAD_MODE).lower()
        self.timeout = timeout or settings.HTTP_TIMEOUT
        self.upload_timeout = upload_timeout or settings.UPLOAD_TIMEOUT
        # Tests swap in httpx.MockTransport
        self.transport = transport

        if self.upload_mode not in ("multipart", "json"):
            raise ValueError(f"Unknown upload mode '{self.upload_mode}'")

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=self.transport)

    async def fetch_places(self) -> list[dict]:
        """Reads the whole place list. Raises FetchFailed on any transport or shape problem."""
        async with self._client(self.timeout) as client:
            try:
                response = await client.get(settings.CATALOG_PLACES_PATH)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise FetchFailed(
                    "Failed to fetch places",
                    details={"status_code": e.response.status_code},
                ) from e
            except httpx.HTTPError as e:
                raise FetchFailed("Failed to fetch places", details=str(e)) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchFailed("Catalog returned invalid JSON") from e

        if not isinstance(payload, list):
            raise FetchFailed("Catalog response shape is invalid", details={"type": type(payload).__name__})
        return payload

    async def upload_place(
        self,
        image: CapturedImage,
        lat: float,
        lng: float,
        title: str,
        description: str,
    ) -> dict[str, Any]:
        """Issues exactly one upload request and returns the parsed success body."""
        async with self._client(self.upload_timeout) as client:
            try:
                if self.upload_mode == "multipart":
                    response = await client.post(
                        settings.CATALOG_SAVE_PATH,
                        data={
                            "lat": str(lat),
                            "lng": str(lng),
                            "title": title,
                            "description": description,
                        },
                        files={"image": (image.filename, image.as_bytes(), image.content_type)},
                    )
                else:
                    response = await client.post(
                        settings.CATALOG_UPLOAD_PATH,
                        json={
                            "image": image.as_base64(),
                            "lat": lat,
                            "lng": lng,
                            "title": title,
                            "description": description,
                        },
                    )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise UploadError(
                    "Failed to upload photo",
                    details={"status_code": e.response.status_code},
                ) from e
            except httpx.HTTPError as e:
                raise UploadError("Failed to upload photo", details=str(e)) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise UploadError("Catalog returned invalid JSON for the upload") from e

        if not isinstance(payload, dict) or not payload.get("title"):
            logs.log(logging.WARNING, "Upload response missing title", extra={"body": payload})
            raise UploadError("Catalog upload response is malformed")
        return payload
