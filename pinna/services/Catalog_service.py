import asyncio
import logging
from typing import Optional

from pinna.core.errors import FetchFailed
from pinna.core.logger import logs
from pinna.models.places_model import LoadStatus, Place
from pinna.repos.catalog_repo import CatalogRepository

class CatalogService:
    """
    Holds the current place snapshot and refreshes it from the remote catalog.
    Only this service writes the snapshot; everything else reads it.
    """
    def __init__(self, repo: CatalogRepository):
        self.repo = repo
        self._places: tuple[Place, ...] = ()
        self._lock = asyncio.Lock()
        self.status = LoadStatus.LOADING
        self.last_error: Optional[FetchFailed] = None
        self.attempted = False

    @property
    def places(self) -> tuple[Place, ...]:
        return self._places

    def get(self, place_id: str) -> Optional[Place]:
        for place in self._places:
            if place.id == place_id:
                return place
        return None

    async def refresh(self) -> tuple[Place, ...]:
        """
        Replaces the snapshot with a fresh read of the catalog.
        Concurrent callers queue behind the refresh in flight. On failure the
        previous snapshot stays visible and FetchFailed is raised; there is no
        automatic retry.
        """
        self.attempted = True
        async with self._lock:
            self.status = LoadStatus.LOADING
            try:
                records = await self.repo.fetch_places()
            except FetchFailed as e:
                self.status = LoadStatus.FAILED
                self.last_error = e
                logs.log(logging.ERROR, f"Catalog refresh failed: {e.message}", extra={"details": e.details})
                raise

            places = self._normalize(records)
            self._places = places
            self.status = LoadStatus.LOADED
            self.last_error = None
            logs.log(logging.INFO, f"Catalog refreshed: {len(places)} places")
            return places

    def _normalize(self, records: list) -> tuple[Place, ...]:
        places = []
        seen_ids = set()

        for record in records:
            if not isinstance(record, dict):
                continue

            raw_id = record.get("id")
            if raw_id is None:
                raw_id = record.get("_id")
            place_id = str(raw_id).strip() if raw_id is not None else ""
            lat = record.get("latitude", record.get("lat"))
            lng = record.get("longitude", record.get("lng"))
            if not place_id or lat is None or lng is None:
                logs.log(logging.WARNING, "Skipping malformed place record", extra={"record": record})
                continue

            if place_id in seen_ids:
                logs.log(logging.WARNING, f"Duplicate place id '{place_id}' in snapshot, keeping the first")
                continue

            try:
                place = Place(
                    id=place_id,
                    title=str(record.get("title") or ""),
                    latitude=float(lat),
                    longitude=float(lng),
                    description=record.get("description"),
                    photo=record.get("photo") or record.get("image") or record.get("imageUrl"),
                )
            except (TypeError, ValueError) as e:
                logs.log(logging.WARNING, f"Skipping place '{place_id}': {str(e)}")
                continue

            seen_ids.add(place_id)
            places.append(place)

        return tuple(places)
