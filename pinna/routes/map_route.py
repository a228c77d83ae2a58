from fastapi import APIRouter, Depends, File, UploadFile

from pinna.models.base_model import MapState, SaveRequest, SaveResponse, SessionRequest, TapRequest
from pinna.models.places_model import Position
from pinna.services.Capture_service import StaticCameraProvider
from pinna.services.session_state import SessionRegistry, get_registry

router = APIRouter(prefix="/sessions")

@router.post("", response_model=MapState)
async def open_session_endpoint(
    request: SessionRequest,
    registry: SessionRegistry = Depends(get_registry)
):
    session = await registry.open(request.session_id, request.location_permission)
    return session.snapshot(request.session_id)

@router.get("/{session_id}", response_model=MapState)
async def get_session_endpoint(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    return registry.get(session_id).snapshot(session_id)

@router.delete("/{session_id}", status_code=204)
async def close_session_endpoint(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    """The view went away: detach the position feed and drop the session."""
    await registry.close(session_id)

@router.post("/{session_id}/position", response_model=MapState)
async def push_position_endpoint(
    session_id: str,
    position: Position,
    registry: SessionRegistry = Depends(get_registry)
):
    session = registry.push_position(session_id, position)
    return session.snapshot(session_id)

@router.post("/{session_id}/tap", response_model=MapState)
async def tap_endpoint(
    session_id: str,
    request: TapRequest,
    registry: SessionRegistry = Depends(get_registry)
):
    session = registry.get(session_id)
    session.tap(request.latitude, request.longitude)
    return session.snapshot(session_id)

@router.post("/{session_id}/places/{place_id}/select", response_model=MapState)
async def select_place_endpoint(
    session_id: str,
    place_id: str,
    registry: SessionRegistry = Depends(get_registry)
):
    session = registry.get(session_id)
    session.select_place(place_id)
    return session.snapshot(session_id)

@router.delete("/{session_id}/selection", response_model=MapState)
async def cancel_selection_endpoint(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = registry.get(session_id)
    session.cancel_selection()
    return session.snapshot(session_id)

@router.post("/{session_id}/photo", response_model=MapState)
async def capture_photo_endpoint(
    session_id: str,
    photo: UploadFile = File(...),
    registry: SessionRegistry = Depends(get_registry)
):
    session = registry.get(session_id)
    camera = StaticCameraProvider(
        await photo.read(),
        content_type=photo.content_type or "image/jpeg",
        filename=photo.filename or "photo.jpg",
    )
    await session.capture(camera)
    return session.snapshot(session_id)

@router.delete("/{session_id}/photo", response_model=MapState)
async def retake_photo_endpoint(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = registry.get(session_id)
    session.retake()
    return session.snapshot(session_id)

@router.post("/{session_id}/save", response_model=SaveResponse)
async def save_place_endpoint(
    session_id: str,
    request: SaveRequest,
    registry: SessionRegistry = Depends(get_registry)
):
    receipt = await registry.get(session_id).save(request.title, request.description)
    return SaveResponse(message=f"Place saved with title: {receipt.title}", title=receipt.title)
