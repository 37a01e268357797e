from pydantic import PrivateAttr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Agency Onboarding API"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    database_url: str = "sqlite+aiosqlite:///./agency_onboarding.db"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Connection pool (ignored for SQLite, which runs on a single static connection)
    db_pool_size: int = 10
    db_pool_timeout: float = 30.0
    db_connect_retries: int = 5
    db_connect_retry_delay: float = 5.0

    # Uploads
    upload_dir: str = "uploads"
    max_upload_mb: int = 10
    max_files_per_request: int = 20

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    _is_sqlite: bool = PrivateAttr(default=False)
    _is_postgresql: bool = PrivateAttr(default=False)

    def model_post_init(self, __context: object) -> None:
        _scheme = self.database_url.split(":")[0].lower()
        object.__setattr__(self, "_is_sqlite", "sqlite" in _scheme)
        object.__setattr__(self, "_is_postgresql", "postgresql" in _scheme)

    @property
    def is_sqlite(self) -> bool:
        return self._is_sqlite

    @property
    def is_postgresql(self) -> bool:
        return self._is_postgresql

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


settings = Settings()
