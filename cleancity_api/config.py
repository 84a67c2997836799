"""Configuration settings for the CleanCity API"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str = "sqlite:///./cleancity.db"

    # Auth
    JWT_SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 7 * 24

    # Photo storage
    STORAGE_BACKEND: str = "local"  # "local" or "minio"
    UPLOAD_PATH: str = "./uploads"
    MAX_FILE_SIZE: int = 10 * 1024 * 1024
    ALLOWED_MIME_TYPES: list[str] = ["image/jpeg", "image/png", "image/webp"]

    # MinIO (only when STORAGE_BACKEND=minio)
    MINIO_ENDPOINT: str = "minio:9000"
    MINIO_ACCESS_KEY: str = "admin"
    MINIO_SECRET_KEY: str = "supersecret"
    MINIO_BUCKET: str = "cleancity-photos"
    MINIO_SECURE: bool = False

    # HTTP
    CORS_ORIGIN: str = "*"  # comma-separated list
    PORT: int = 3000

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
