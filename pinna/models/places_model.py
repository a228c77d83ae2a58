from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from enum import Enum

# --- Enums ---
class LoadStatus(str, Enum):
    LOADING = "LOADING"
    LOADED = "LOADED"
    FAILED = "FAILED"

class MarkerKind(str, Enum):
    PLACE = "place"
    USER = "user"
    PENDING = "pending"

# --- Domain Models ---
class Place(BaseModel):
    """A catalog entry. Snapshots are replaced wholesale, never patched."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    latitude: float
    longitude: float
    description: Optional[str] = None
    photo: Optional[str] = None

class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

class PendingPin(BaseModel):
    """An unsaved pin dropped where the tap matched no place."""
    latitude: float
    longitude: float
    draft_title: str = ""
    draft_description: str = ""

class RankedPlace(BaseModel):
    place: Place
    distance_km: Optional[float] = None  # None while the user's position is unknown

class Region(BaseModel):
    latitude: float
    longitude: float
    latitude_delta: float
    longitude_delta: float

class MapMarker(BaseModel):
    id: str
    kind: MarkerKind
    latitude: float
    longitude: float
    title: Optional[str] = None
    selected: bool = False
