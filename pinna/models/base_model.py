from pydantic import BaseModel, Field
from typing import Optional, List

from pinna.models.capture_model import CaptureState
from pinna.models.places_model import LoadStatus, MapMarker, PendingPin, Place, Position, RankedPlace, Region

# --- API Request Models ---
class SessionRequest(BaseModel):
    session_id: str = Field(..., description="Unique identifier for the map view session")
    location_permission: bool = Field(True, description="Whether the device granted location access")

class TapRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

class SaveRequest(BaseModel):
    title: str = ""
    description: str = ""

# --- API Response Models ---
class MapState(BaseModel):
    """Everything the rendering layer needs to draw one map view"""
    session_id: str
    load_status: LoadStatus
    tracking: str
    position: Optional[Position] = None
    places: List[RankedPlace] = []
    markers: List[MapMarker] = []
    selected_place: Optional[Place] = None
    pending_pin: Optional[PendingPin] = None
    capture_state: CaptureState
    has_photo: bool = False
    camera_target: Optional[Region] = None
    initial_region: Region
    error: Optional[str] = None

class PlaceListItem(BaseModel):
    place: Place
    distance_km: Optional[float] = None
    distance_label: str
    directions_url: str

class PlacesResponse(BaseModel):
    load_status: LoadStatus
    places: List[PlaceListItem]
    error: Optional[str] = None

class SaveResponse(BaseModel):
    message: str
    title: str
