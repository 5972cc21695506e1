from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the relay and the terminal client."""

    #----------------------------------------------------------
    # External API settings
    #----------------------------------------------------------
    stability_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Bearer credential for the Stability image generation API.",
    )

    stability_api_host: str = Field(
        default="https://api.stability.ai",
        description="Base URL of the Stability REST API.",
    )

    stability_engine_id: str = Field(
        default="stable-diffusion-xl-1024-v1-0",
        description="Engine used for text-to-image generation.",
    )

    provider_timeout: Optional[float] = Field(
        default=None,
        description="Seconds to wait for the provider. None waits until the call completes.",
    )

    #----------------------------------------------------------
    # Relay server settings
    #----------------------------------------------------------
    host: str = Field(
        default="0.0.0.0",
        description="Interface the relay binds to.",
    )

    port: int = Field(
        default=3001,
        description="Port the relay listens on.",
    )

    #----------------------------------------------------------
    # Client settings
    #----------------------------------------------------------
    relay_url: str = Field(
        default="http://localhost:3001",
        description="Base URL of the relay used by the client application.",
    )
    relay_timeout: Optional[float] = Field(
        default=None,
        description="Seconds the client waits for the relay. None waits indefinitely.",
    )
    client_state_path: str = Field(
        default="imageprompt_state.db",
        description="SQLite file holding the client's prompt text and image history.",
    )
    download_dir: str = Field(
        default=".",
        description="Directory generated images are saved to on download.",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def stability_url(self) -> str:
        host = self.stability_api_host.rstrip("/")
        return f"{host}/v1/generation/{self.stability_engine_id}/text-to-image"


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
