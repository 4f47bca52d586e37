import os
from typing import FrozenSet, List, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv(override=True)


class IngestionApiConfig(BaseModel):
    base_url: str = os.getenv("INGESTION_API_BASE_URL", "http://localhost:5287")
    importacoes_path: str = os.getenv(
        "INGESTION_API_IMPORTACOES_PATH", "/operacoes/importacoes"
    )
    timeout: float = float(os.getenv("INGESTION_API_TIMEOUT", "30"))

    # Bearer token for the legacy auth scheme; cookie auth is handled upstream
    token: Optional[str] = os.getenv("INGESTION_API_TOKEN")


class PollingConfig(BaseModel):
    interval_seconds: float = float(os.getenv("POLL_INTERVAL_SECONDS", "5"))
    default_page_size: int = int(os.getenv("POLL_DEFAULT_PAGE_SIZE", "10"))


class LiveUpdatesConfig(BaseModel):
    enabled: bool = os.getenv("LIVE_UPDATES_ENABLED", "true").lower() == "true"
    hub_path: str = os.getenv("LIVE_UPDATES_HUB_PATH", "/hubs/importacoes")
    # Change notifications arriving within this window cause a single list refresh
    coalesce_seconds: float = float(os.getenv("LIVE_UPDATES_COALESCE_SECONDS", "0.3"))
    reconnect_delays: Tuple[float, ...] = (0, 2, 5, 10)
    empresa_ids: List[str] = [
        empresa_id.strip()
        for empresa_id in os.getenv("LIVE_UPDATES_EMPRESA_IDS", "").split(",")
        if empresa_id.strip()
    ]


class UploadConfig(BaseModel):
    max_file_bytes: int = 20 * 1024 * 1024
    accepted_extensions: FrozenSet[str] = frozenset(
        {".rem", ".txt", ".cnab", ".xml", ".zip", ".xlsx"}
    )


class AppConfig(BaseModel):
    ingestion_api: IngestionApiConfig = IngestionApiConfig()
    polling: PollingConfig = PollingConfig()
    upload: UploadConfig = UploadConfig()
    live_updates: LiveUpdatesConfig = LiveUpdatesConfig()
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


config = AppConfig()
