from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_path: Path = Path.home() / "DevConnector"
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ]
    # Security: tokens are signed with this secret; override it in every deployment.
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_seconds: int = 36000
    min_password_length: int = 6
    default_avatar: str = (
        "https://res.cloudinary.com/devconnector/image/upload/"
        "v1573919482/devconnector/placeholder-user_xj5xzf.jpg"
    )
    find_page_size: int = 15
    github_api_url: str = "https://api.github.com"
    github_client_id: str | None = None
    github_client_secret: str | None = None
    github_timeout_seconds: float = 10.0
    # SQLite waits this long for a competing writer before giving up.
    db_busy_timeout_seconds: float = 5.0

    @property
    def db_path(self) -> Path:
        return self.data_path / "db.sqlite"

    model_config = {"env_prefix": "DEVCONNECT_"}


settings = Settings()
