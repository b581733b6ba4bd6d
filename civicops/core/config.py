from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "CivicOps Service Request API"
    DATABASE_URL: str = "sqlite:///./civicops.db"
    LOG_LEVEL: str = "INFO"

    # Workload counters on users are display-only unless this is enabled.
    DEFAULT_MAX_WORKLOAD: int = 5
    MAINTAIN_WORKLOAD_COUNTERS: bool = False

    CATEGORY_STATS_SCAN_LIMIT: int = 1000

    class Config:
        env_file = ".env"

settings = Settings()
