"""
Application Settings

Values are read from the environment (prefix CLAIMS_) or a local .env file.
"""
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_title: str = "Claim Review Service"

    # None keeps claims in process memory
    database_path: Optional[str] = None
    uploads_dir: str = "data/uploads"

    allowed_extensions: List[str] = [".pdf", ".doc", ".docx"]
    max_upload_bytes: int = 10 * 1024 * 1024

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="CLAIMS_", env_file=".env", extra="ignore")
