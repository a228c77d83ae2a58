from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    LOGGER: int = 20
    LOG_DIRECTORY: str = "logs"
    LOG_TO_FILE: bool = True

    # Remote catalog service
    CATALOG_BASE_URL: str = "https://pinna-api.onrender.com"
    CATALOG_PLACES_PATH: str = "/places"
    CATALOG_SAVE_PATH: str = "/save"      # multipart upload
    CATALOG_UPLOAD_PATH: str = "/upload"  # JSON upload with base64 image
    UPLOAD_MODE: str = "multipart"  # Options: multipart, json

    HTTP_TIMEOUT: float = 10.0
    UPLOAD_TIMEOUT: float = 30.0

    # Tap-to-pin matching
    TAP_TOLERANCE_DEGREES: float = 0.0005
    TAP_MATCH_POLICY: str = "first"  # Options: first, nearest

    # Map viewport
    DEFAULT_LATITUDE: float = 57.7
    DEFAULT_LONGITUDE: float = 11.95
    OVERVIEW_DELTA: float = 0.05
    FOCUS_DELTA: float = 0.01

    DIRECTIONS_TRAVEL_MODE: str = "driving"

    model_config = SettingsConfigDict(
        # Look for .env in the current folder OR the parent folder
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
