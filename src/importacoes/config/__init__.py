from importacoes.config.config import (
    AppConfig,
    IngestionApiConfig,
    LiveUpdatesConfig,
    PollingConfig,
    UploadConfig,
    config,
)

__all__ = [
    "AppConfig",
    "IngestionApiConfig",
    "LiveUpdatesConfig",
    "PollingConfig",
    "UploadConfig",
    "config",
]
