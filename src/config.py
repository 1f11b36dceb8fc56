from __future__ import annotations

from functools import cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    currencylayer_api_key: str = ""
    currencylayer_base_url: str = "http://apilayer.net/api"
    currencylayer_timeout: float = Field(default=10.0, gt=0)
    quotes_refresh_minutes: int = 60
    quotes_currencies: str = "CHF,GBP,CAD,AUD,CZK,RUB"
    quotes_file: Path = Path("currencies.json")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("quotes_refresh_minutes")
    @classmethod
    def _absolute_refresh_minutes(cls, value: int) -> int:
        return abs(value)

    @property
    def currency_codes(self) -> list[str]:
        return [code.strip().upper() for code in self.quotes_currencies.split(",") if code.strip()]


@cache
def config() -> AppSettings:
    return AppSettings()
