import base64
from enum import Enum
from typing import Any, Dict, Union

from pydantic import BaseModel, Field

class ImageEncoding(str, Enum):
    RAW = "raw"
    BASE64 = "base64"

class CaptureState(str, Enum):
    IDLE = "IDLE"
    CAPTURING = "CAPTURING"
    PREVIEWING = "PREVIEWING"
    UPLOADING = "UPLOADING"
    SAVED = "SAVED"
    UPLOAD_FAILED = "UPLOAD_FAILED"

class CapturedImage(BaseModel):
    """Opaque photo payload handed over by the camera."""
    data: Union[bytes, str]
    encoding: ImageEncoding = ImageEncoding.RAW
    content_type: str = "image/jpeg"
    filename: str = "photo.jpg"

    def as_bytes(self) -> bytes:
        if self.encoding == ImageEncoding.BASE64:
            return base64.b64decode(self.data)
        return self.data if isinstance(self.data, bytes) else self.data.encode("latin-1")

    def as_base64(self) -> str:
        if self.encoding == ImageEncoding.BASE64:
            return self.data if isinstance(self.data, str) else self.data.decode("ascii")
        return base64.b64encode(self.as_bytes()).decode("ascii")

class UploadReceipt(BaseModel):
    title: str
    raw: Dict[str, Any] = Field(default_factory=dict)
