import logging
from typing import Optional, Union
from urllib.parse import urlencode

from pinna.core.config import settings
from pinna.core.errors import FetchFailed, UploadInProgress, resource_not_found
from pinna.core.logger import logs
from pinna.models.base_model import MapState
from pinna.models.capture_model import CapturedImage, CaptureState, UploadReceipt
from pinna.models.places_model import MapMarker, MarkerKind, PendingPin, Place, Position, RankedPlace, Region
from pinna.repos.catalog_repo import CatalogRepository
from pinna.services.Capture_service import CameraProvider, CapturePipeline
from pinna.services.Catalog_service import CatalogService
from pinna.services.Pin_service import PinResolver
from pinna.services.Position_service import LocationProvider, PositionTracker, Subscription
from pinna.services.Proximity_service import rank_with_distance

GOOGLE_DIRECTIONS_URL = "https://www.google.com/maps/dir/"

class MapSession:
    """
    Context object for one visible map view.

    Owns the tracker, catalog, resolver and capture pipeline and wires them
    together: position -> ranking, taps -> selection, save -> refresh.
    close() must be called when the view goes away.
    """
    def __init__(
        self,
        catalog: CatalogService,
        tracker: PositionTracker,
        resolver: PinResolver,
        pipeline: CapturePipeline,
    ):
        self.catalog = catalog
        self.tracker = tracker
        self.resolver = resolver
        self.pipeline = pipeline
        self.camera_target: Optional[Region] = None
        self.closed = False
        self._recentered = False
        self._position_listener: Optional[Subscription] = None

    @classmethod
    def create(cls, provider: LocationProvider, repo: CatalogRepository = None) -> "MapSession":
        repo = repo or CatalogRepository()
        return cls(
            catalog=CatalogService(repo),
            tracker=PositionTracker(provider),
            resolver=PinResolver(),
            pipeline=CapturePipeline(repo),
        )

    # --- Lifecycle ---
    async def open(self) -> None:
        self._position_listener = self.tracker.on_update(self._on_position)
        await self.tracker.start()
        self.pipeline.bind_refresh(self._refresh_after_save)
        await self.refresh()

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._position_listener is not None:
            self._position_listener.remove()
            self._position_listener = None
        self.tracker.stop()
        self.pipeline.unbind_refresh()
        logs.log(logging.INFO, "Map session closed")

    async def refresh(self) -> bool:
        """Refreshes the catalog; a failure is kept in the load status instead of raised."""
        try:
            await self.catalog.refresh()
            return True
        except FetchFailed:
            return False

    async def _refresh_after_save(self) -> None:
        if self.closed:
            return
        await self.catalog.refresh()

    # --- Position ---
    @property
    def position(self) -> Optional[Position]:
        return self.tracker.latest()

    def _on_position(self, position: Position) -> None:
        # Only the first fix moves the camera; later fixes leave user panning alone
        if self._recentered:
            return
        self._recentered = True
        self.camera_target = self._region_at(position.latitude, position.longitude, settings.FOCUS_DELTA)
        logs.log(logging.INFO, f"First position fix at {position.latitude}, {position.longitude}, recentering")

    def ranked_places(self) -> list[RankedPlace]:
        return rank_with_distance(self.catalog.places, self.position)

    # --- Selection ---
    def tap(self, latitude: float, longitude: float) -> Union[Place, PendingPin]:
        # Any photo taken belongs to the pin being replaced
        self.pipeline.discard()
        selection = self.resolver.resolve_tap(
            Position(latitude=latitude, longitude=longitude), self.catalog.places
        )
        if isinstance(selection, Place):
            self._focus(selection)
        return selection

    def select_place(self, place_id: str) -> Place:
        place = self.catalog.get(place_id)
        if place is None:
            raise resource_not_found("Place", place_id)
        self.pipeline.discard()
        self.resolver.select_place(place)
        self._focus(place)
        return place

    def cancel_selection(self) -> None:
        self.resolver.clear_selection()
        self.pipeline.discard()

    def _focus(self, place: Place) -> None:
        self.camera_target = self._region_at(place.latitude, place.longitude, settings.FOCUS_DELTA)

    # --- Capture & upload ---
    async def capture(self, camera: CameraProvider) -> CapturedImage:
        if self.resolver.pending_pin is None:
            raise resource_not_found("Pending pin")
        return await self.pipeline.capture(camera)

    def retake(self) -> None:
        self.pipeline.retake()

    async def save(self, title: str, description: str) -> UploadReceipt:
        pin = self.resolver.pending_pin
        if pin is None:
            raise resource_not_found("Pending pin")
        if self.pipeline.state == CaptureState.UPLOADING:
            raise UploadInProgress()
        self.resolver.update_draft(title=title, description=description)

        receipt = await self.pipeline.save(pin, title, description)
        # The view may have moved on to another pin while the upload ran
        if self.resolver.pending_pin is pin:
            self.resolver.clear_selection()
        return receipt

    # --- Rendering data ---
    def _region_at(self, latitude: float, longitude: float, delta: float) -> Region:
        return Region(latitude=latitude, longitude=longitude, latitude_delta=delta, longitude_delta=delta)

    def initial_region(self) -> Region:
        places = self.catalog.places
        position = self.position
        if position is not None and places:
            return self._region_at(position.latitude, position.longitude, settings.OVERVIEW_DELTA)
        if places:
            return self._region_at(places[0].latitude, places[0].longitude, settings.OVERVIEW_DELTA)
        return self._region_at(settings.DEFAULT_LATITUDE, settings.DEFAULT_LONGITUDE, settings.OVERVIEW_DELTA)

    def markers(self) -> list[MapMarker]:
        selected = self.resolver.selected_place
        markers = [
            MapMarker(
                id=place.id,
                kind=MarkerKind.PLACE,
                latitude=place.latitude,
                longitude=place.longitude,
                title=place.title,
                selected=selected is not None and selected.id == place.id,
            )
            for place in self.catalog.places
        ]

        position = self.position
        if position is not None:
            markers.append(MapMarker(
                id="user", kind=MarkerKind.USER,
                latitude=position.latitude, longitude=position.longitude, title="You",
            ))

        pin = self.resolver.pending_pin
        if pin is not None:
            markers.append(MapMarker(
                id="pending", kind=MarkerKind.PENDING,
                latitude=pin.latitude, longitude=pin.longitude,
                title=pin.draft_title or None, selected=True,
            ))
        return markers

    def snapshot(self, session_id: str) -> MapState:
        error = self.catalog.last_error
        return MapState(
            session_id=session_id,
            load_status=self.catalog.status,
            tracking=self.tracker.state.value,
            position=self.position,
            places=self.ranked_places(),
            markers=self.markers(),
            selected_place=self.resolver.selected_place,
            pending_pin=self.resolver.pending_pin,
            capture_state=self.pipeline.state,
            has_photo=self.pipeline.image is not None,
            camera_target=self.camera_target,
            initial_region=self.initial_region(),
            error=error.message if error else None,
        )


def directions_url(place: Place, travel_mode: str = None) -> str:
    query = {
        "api": "1",
        "destination": f"{place.latitude},{place.longitude}",
        "travelmode": travel_mode or settings.DIRECTIONS_TRAVEL_MODE,
    }
    return f"{GOOGLE_DIRECTIONS_URL}?{urlencode(query, safe=',')}"
