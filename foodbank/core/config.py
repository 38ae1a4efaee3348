from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    jwt_secret: str = "dev"
    jwt_alg: str = "HS256"
    access_ttl_min: int = 60

    # None keeps donations in memory only
    storage_path: Optional[Path] = None
    default_radius_km: float = 10.0
    seed_demo_users: bool = True

    # nominatim | opencage | google
    geocoder: str = "nominatim"
    opencage_key: Optional[str] = None
    google_maps_key: Optional[str] = None
    admin_contact: str = "mailto:admin@example.com"
    geocode_timeout: float = 12.0

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
