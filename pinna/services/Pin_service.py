import logging
from typing import Optional, Sequence, Union

from pinna.core.config import settings
from pinna.core.errors import resource_not_found
from pinna.core.geo import distance
from pinna.core.logger import logs
from pinna.models.places_model import PendingPin, Place, Position

Selection = Union[Place, PendingPin, None]

class PinResolver:
    """
    Classifies map taps against the place snapshot and owns the selection.

    The selection is a single slot, so a selected place and a pending pin
    can never coexist.
    """
    def __init__(self, tolerance_degrees: float = None, match_policy: str = None):
        self.tolerance_degrees = (
            settings.TAP_TOLERANCE_DEGREES if tolerance_degrees is None else tolerance_degrees
        )
        self.match_policy = (match_policy or settings.TAP_MATCH_POLICY).lower()
        if self.match_policy not in ("first", "nearest"):
            raise ValueError(f"Unknown tap match policy '{self.match_policy}'")
        self._selection: Selection = None

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def selected_place(self) -> Optional[Place]:
        return self._selection if isinstance(self._selection, Place) else None

    @property
    def pending_pin(self) -> Optional[PendingPin]:
        return self._selection if isinstance(self._selection, PendingPin) else None

    def match(self, coord: Position, places: Sequence[Place], tolerance_degrees: float = None) -> Optional[Place]:
        """Returns the place whose tolerance box contains coord, if any."""
        tolerance = self.tolerance_degrees if tolerance_degrees is None else tolerance_degrees
        candidates = (
            place for place in places
            if abs(place.latitude - coord.latitude) <= tolerance
            and abs(place.longitude - coord.longitude) <= tolerance
        )

        if self.match_policy == "first":
            # Overlapping boxes resolve to whichever place the server listed first
            return next(candidates, None)
        return min(candidates, key=lambda place: distance(coord, place), default=None)

    def resolve_tap(self, coord: Position, places: Sequence[Place], tolerance_degrees: float = None) -> Union[Place, PendingPin]:
        place = self.match(coord, places, tolerance_degrees)
        if place is not None:
            logs.log(logging.INFO, f"Tap at {coord.latitude}, {coord.longitude} matched place '{place.id}'")
            return self.select_place(place)

        pin = PendingPin(latitude=coord.latitude, longitude=coord.longitude)
        self._selection = pin
        logs.log(logging.INFO, f"Tap at {coord.latitude}, {coord.longitude} dropped a new pin")
        return pin

    def select_place(self, place: Place) -> Place:
        self._selection = place
        return place

    def update_draft(self, title: str = None, description: str = None) -> PendingPin:
        pin = self.pending_pin
        if pin is None:
            raise resource_not_found("Pending pin")
        if title is not None:
            pin.draft_title = title
        if description is not None:
            pin.draft_description = description
        return pin

    def clear_selection(self) -> None:
        self._selection = None
