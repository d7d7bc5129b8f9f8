from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LOCKERKEEP_", extra="ignore")

    database_url: str = "sqlite+pysqlite:///:memory:"
    rooms_path: Path = Path(__file__).resolve().parents[1] / "rooms.yaml"
    log_level: str = "INFO"
    json_logs: bool = False
    provision_on_startup: bool = False
    key_log_page_size: int = 50


settings = Settings()
