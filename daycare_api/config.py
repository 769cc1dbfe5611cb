from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str
    database_echo: bool = False

    # Security (tokens are issued by the identity provider, we only verify them)
    secret_key: str
    algorithm: str = "HS256"

    # Redis
    redis_url: str = ""  # Optional Redis URL for pub/sub (local: redis://localhost:6379)

    # Roles as named by the identity provider
    admin_role: str = "Admin"
    teacher_role: str = "Teacher"
    parent_role: str = "Parent"

    # Counterpart label shown for broadcast messages
    broadcast_label: str = "All Users"

    cors_origins: list[str] = [
        "http://localhost:4200",
    ]

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
