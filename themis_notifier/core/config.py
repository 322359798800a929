import re
from typing import Optional

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Header carrying the instance API key on every request
THEMIS_API_KEY = "themis-api-key"

_VALID_URL = re.compile(r"^https?://.+")


class ThemisInstance(BaseModel):
    """A named Themis instance: where it lives and how to authenticate.

    Names, URLs and API keys are required; URLs must be http(s) and are
    stored without a trailing slash so endpoint paths can be appended.
    """

    name: str
    url: str
    api_key: str

    @field_validator("name", "api_key")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("url")
    @classmethod
    def valid_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        v = v.strip()
        if not _VALID_URL.match(v):
            raise ValueError("must start with http:// or https://")
        return v.rstrip("/")


class Settings(BaseSettings):
    """Notifier settings loaded from environment variables.

    Instances are given as a JSON list, e.g.
    THEMIS_INSTANCES='[{"name": "prod", "url": "https://...", "api_key": "..."}]'.
    """

    model_config = SettingsConfigDict(
        env_prefix="THEMIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    instances: list[ThemisInstance] = []

    # Seconds; None waits indefinitely like a plain CI plugin would.
    request_timeout: Optional[float] = None

    # Upper bound on categories uploaded in parallel; None means one per category.
    max_workers: Optional[int] = None

    # Outbound proxy URL, e.g. "http://proxy.local:3128".
    proxy: Optional[str] = None

    debug: bool = False

    @field_validator("max_workers")
    @classmethod
    def positive_workers(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("must be at least 1")
        return v

    def get_instance(self, name: str) -> Optional[ThemisInstance]:
        if name is None:
            raise ValueError("Instance name must not be None")
        return next((i for i in self.instances if i.name == name), None)


def get_settings() -> Settings:
    return Settings()
