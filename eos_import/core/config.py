"""Application configuration loaded from environment variables."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Redis
    redis_host: str = "127.0.0.1"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None
    redis_socket_timeout: float = 5.0

    # Backend
    backend_host: str = "0.0.0.0"
    backend_port: int = 5000

    # Uploads
    upload_dir: str = "uploads"
    upload_ttl_seconds: int = 60 * 60
    max_upload_bytes: int = 10 * 1024 * 1024
    preview_rows: int = 5

    # Import behaviour
    reject_invalid_imports: bool = False

    # Fallback identities used when the caller does not supply them
    default_user_id: str = "00000000-0000-4000-8000-000000000002"
    default_organization_id: str = "00000000-0000-4000-8000-000000000001"

    # Paths (relative to project root)
    aliases_dir: str = "aliases"

    @property
    def project_root(self) -> Path:
        return Path(__file__).parent.parent.parent

    def resolve_path(self, value: str) -> Path:
        path = Path(value)
        if not path.is_absolute():
            path = self.project_root / path
        return path

    model_config = {"env_file": ".env", "env_prefix": "", "extra": "ignore"}


settings = Settings()
