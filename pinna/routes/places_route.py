from typing import Optional

from fastapi import APIRouter, Depends, Query

from pinna.core.errors import FetchFailed
from pinna.models.base_model import PlaceListItem, PlacesResponse
from pinna.models.places_model import Position
from pinna.repos.catalog_repo import CatalogRepository
from pinna.services.Catalog_service import CatalogService
from pinna.services.Map_service import directions_url
from pinna.services.Proximity_service import format_distance, rank_with_distance

router = APIRouter()

_catalog: Optional[CatalogService] = None

# --- Dependency Injection ---
def get_catalog_service() -> CatalogService:
    global _catalog
    if _catalog is None:
        _catalog = CatalogService(CatalogRepository())
    return _catalog

def _to_response(catalog: CatalogService, position: Optional[Position]) -> PlacesResponse:
    items = [
        PlaceListItem(
            place=ranked.place,
            distance_km=ranked.distance_km,
            distance_label=format_distance(ranked.distance_km),
            directions_url=directions_url(ranked.place),
        )
        for ranked in rank_with_distance(catalog.places, position)
    ]
    error = catalog.last_error
    return PlacesResponse(
        load_status=catalog.status,
        places=items,
        error=error.message if error else None,
    )

@router.get("/places", response_model=PlacesResponse)
async def list_places_endpoint(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """
    Places nearest-first from (lat, lon). Without coordinates the catalog's
    own order is kept. The first call loads the catalog; after a failed
    load the stale snapshot is served until POST /places/refresh.
    """
    if not catalog.attempted:
        try:
            await catalog.refresh()
        except FetchFailed:
            # Serve the stale (or empty) snapshot; status and error tell the client
            pass

    position = Position(latitude=lat, longitude=lon) if lat is not None and lon is not None else None
    return _to_response(catalog, position)

@router.post("/places/refresh", response_model=PlacesResponse)
async def refresh_places_endpoint(catalog: CatalogService = Depends(get_catalog_service)):
    await catalog.refresh()
    return _to_response(catalog, None)
