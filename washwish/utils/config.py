import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    storage: str = "memory"
    data_dir: str = "data"
    payment_secret: str = "test_secret"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    api_host: str = "localhost"
    api_port: int = 8000


def get_settings() -> Settings:
    """
    Reads settings from the environment, after loading a .env file if present
    """
    load_dotenv()
    return Settings(
        storage=os.getenv("WASHWISH_STORAGE", "memory").lower(),
        data_dir=os.getenv("WASHWISH_DATA_DIR", "data"),
        payment_secret=os.getenv("WASHWISH_PAYMENT_SECRET", "test_secret"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_file=os.getenv("LOG_FILE") or None,
        api_host=os.getenv("API_HOST", "localhost"),
        api_port=int(os.getenv("API_PORT", 8000)),
    )
