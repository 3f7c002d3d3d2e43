from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Append-only message log. SQLite file by default; the directory is created at startup.
    DATABASE_URL: str = "sqlite:///./data/messages.db"
    CORS_ORIGINS: list[str] = ["*"]
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Display names, claimed per connection, never persisted
    USERNAME_MIN_LENGTH: int = 2
    USERNAME_MAX_LENGTH: int = 32

    # Messages
    MESSAGE_MAX_LENGTH: int = 2000
    MESSAGE_PAGE_SIZE: int = 30
    MESSAGE_PAGE_MAX: int = 100

    # Per-connection outbound buffer; a client that falls this far behind is dropped
    SEND_QUEUE_SIZE: int = 256

    # Image uploads
    UPLOAD_DIR: str = "./uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_SIZE: int = 10_485_760  # 10 MB
    ALLOWED_MIME_TYPES: list[str] = [
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    ]
    ALLOWED_EXTENSIONS: list[str] = [".jpeg", ".jpg", ".png", ".gif", ".webp"]
    IMAGE_MAX_DIMENSION: int = 1200
    IMAGE_JPEG_QUALITY: int = 80
    UPLOAD_PROCESS_TIMEOUT: float = 30.0  # seconds

    # Game launcher catalog, seeded with the defaults when the file is missing
    GAMES_FILE: str = "./data/games.json"

    model_config = {"env_file": ".env"}


settings = Settings()
