from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    DATASET_PATH: str = str(ROOT_DIR / "data" / "cde_ipaas_dataset.csv")
    # Unset means a fresh, unseeded fleet on every start
    RANDOM_SEED: Optional[int] = None
    CORS_ORIGINS: str = "http://localhost:3000"
    PAGE_SIZE: int = 24
    MAX_PAGE_SIZE: int = 200
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=[
            Path(__file__).resolve().parents[2] / ".env",
            Path(".env"),
        ],
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
