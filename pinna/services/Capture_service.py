"""
Capture-to-upload pipeline.

IDLE -> CAPTURING -> PREVIEWING -> UPLOADING -> SAVED | UPLOAD_FAILED
retake() goes back to CAPTURING. One upload per pipeline at a time.
"""
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, Union

from pinna.core.errors import (
    CaptureError,
    PermissionDenied,
    PinnaException,
    UploadError,
    UploadInProgress,
    ValidationError,
)
from pinna.core.logger import logs
from pinna.models.capture_model import CapturedImage, CaptureState, ImageEncoding, UploadReceipt
from pinna.models.places_model import PendingPin
from pinna.repos.catalog_repo import CatalogRepository

RefreshCallback = Callable[[], Awaitable[object]]


class CameraProvider(ABC):
    """Device camera"""

    @abstractmethod
    async def request_permission(self) -> bool:
        pass

    @abstractmethod
    async def take_picture(self) -> CapturedImage:
        pass


class StaticCameraProvider(CameraProvider):
    """Camera stand-in for a photo the client already took and sent over."""

    def __init__(self, data: Union[bytes, str], encoding: ImageEncoding = ImageEncoding.RAW,
                 content_type: str = "image/jpeg", filename: str = "photo.jpg"):
        self.image = CapturedImage(data=data, encoding=encoding, content_type=content_type, filename=filename)

    async def request_permission(self) -> bool:
        return True

    async def take_picture(self) -> CapturedImage:
        if not self.image.data:
            raise CaptureError("The submitted photo is empty")
        return self.image


class CapturePipeline:
    def __init__(self, repo: CatalogRepository):
        self.repo = repo
        self.state = CaptureState.IDLE
        self.image: Optional[CapturedImage] = None
        self.draft_title = ""
        self.draft_description = ""
        self._camera_granted = False
        self._on_saved: Optional[RefreshCallback] = None
        self._discard_pending = False

    # --- Refresh signal ---
    def bind_refresh(self, callback: RefreshCallback) -> None:
        self._on_saved = callback

    def unbind_refresh(self) -> None:
        self._on_saved = None

    # --- Capture ---
    async def capture(self, camera: CameraProvider) -> CapturedImage:
        if self.state == CaptureState.UPLOADING:
            raise UploadInProgress()
        if self.image is not None:
            raise CaptureError("Discard the current photo before taking another one")

        self.state = CaptureState.CAPTURING

        if not self._camera_granted:
            try:
                self._camera_granted = await camera.request_permission()
            except Exception as e:
                logs.log(logging.ERROR, f"Camera permission request failed: {str(e)}")
                self._camera_granted = False
            if not self._camera_granted:
                raise PermissionDenied("camera")

        try:
            image = await camera.take_picture()
        except PinnaException:
            raise
        except Exception as e:
            logs.log(logging.ERROR, f"Camera capture failed: {str(e)}")
            raise CaptureError("Failed to take photo", details=str(e)) from e

        self.image = image
        self.state = CaptureState.PREVIEWING
        return image

    def retake(self) -> None:
        if self.state == CaptureState.UPLOADING:
            raise UploadInProgress()
        self.image = None
        self.state = CaptureState.CAPTURING

    def discard(self) -> None:
        """
        Cancel path. An upload already in flight is left to finish and the
        photo is dropped once it settles, whatever the outcome.
        """
        if self.state == CaptureState.UPLOADING:
            logs.log(logging.DEBUG, "Discard requested during upload, deferring until it settles")
            self._discard_pending = True
            return
        self._reset()

    def _reset(self) -> None:
        self.image = None
        self.draft_title = ""
        self.draft_description = ""
        self.state = CaptureState.IDLE
        self._discard_pending = False

    # --- Save ---
    def _validate(self, title: str, description: str) -> None:
        missing = []
        if not (title or "").strip():
            missing.append("title")
        if not (description or "").strip():
            missing.append("description")
        if missing:
            raise ValidationError(missing)
        if self.image is None:
            raise ValidationError(["image"])

    async def save(self, pin: PendingPin, title: str, description: str) -> UploadReceipt:
        """
        Uploads the captured photo with the pin's coordinates.

        Raises UploadInProgress while another save is running, ValidationError
        before any network call, and UploadError after a failed attempt. A
        failed attempt keeps the photo and draft so save() can be retried,
        unless discard() was called while it ran.
        """
        if self.state == CaptureState.UPLOADING:
            raise UploadInProgress()
        self._validate(title, description)

        # Guard is set before the first await
        self.state = CaptureState.UPLOADING
        self.draft_title = title.strip()
        self.draft_description = description.strip()
        image = self.image

        try:
            body = await self.repo.upload_place(
                image=image,
                lat=pin.latitude,
                lng=pin.longitude,
                title=self.draft_title,
                description=self.draft_description,
            )
        except PinnaException as e:
            self._upload_failed()
            logs.log(logging.ERROR, f"Upload failed: {e.message}", extra={"details": e.details})
            raise
        except Exception as e:
            self._upload_failed()
            logs.log(logging.ERROR, f"Upload failed: {str(e)}")
            raise UploadError("Failed to upload photo", details=str(e)) from e

        receipt = UploadReceipt(title=str(body["title"]), raw=body)
        self.state = CaptureState.SAVED
        self.image = None
        self.draft_title = ""
        self.draft_description = ""
        self._discard_pending = False
        logs.log(logging.INFO, f"✓ Place saved with title: {receipt.title}")

        await self._signal_saved()
        return receipt

    def _upload_failed(self) -> None:
        if self._discard_pending:
            # The pin this photo belonged to is gone
            self._reset()
            return
        self.state = CaptureState.UPLOAD_FAILED

    async def _signal_saved(self) -> None:
        callback = self._on_saved
        if callback is None:
            logs.log(logging.DEBUG, "No catalog view bound, skipping refresh")
            return
        try:
            await callback()
        except Exception as e:
            logs.log(logging.WARNING, f"Refresh after save failed: {str(e)}")
