"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    CHAIN_ALIASES,
    CHAIN_ALLOCATIONS,
    DEFAULT_COINGECKO_API_URL,
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_REFRESH_INTERVAL,
    FUND_TARGET,
    MAX_PRICE,
    MIN_PRICE,
    SALE_SUPPLY,
    TOTAL_SUPPLY,
)

load_dotenv()

SECRET_FIELDS = {"coingecko_api_key"}


class Network(str, Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"


class PricingSettings(BaseModel):
    """Bonding curve parameters."""

    total_supply: float = Field(default=TOTAL_SUPPLY, gt=0)
    sale_supply: float = Field(default=SALE_SUPPLY, gt=0)
    fund_target: float = Field(default=FUND_TARGET, gt=0)
    min_price: float = Field(default=MIN_PRICE, ge=0)
    max_price: float = Field(default=MAX_PRICE, ge=0)
    allocations: dict[str, float] = Field(
        default_factory=lambda: dict(CHAIN_ALLOCATIONS)
    )
    chain_aliases: dict[str, str] = Field(default_factory=lambda: dict(CHAIN_ALIASES))

    model_config = ConfigDict(extra="ignore")

    @field_validator("allocations", "chain_aliases", mode="after")
    @classmethod
    def upper_case_keys(cls, v: dict[str, Any]) -> dict[str, Any]:
        return {
            key.upper(): value.upper() if isinstance(value, str) else value
            for key, value in v.items()
        }


class TreasurySettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with TREASURY_ORACLE_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- network selection ---
    network: Network = Network.MAINNET
    testnet: bool = False

    # --- fetching ---
    fetch_timeout: float = Field(
        default=DEFAULT_FETCH_TIMEOUT,
        gt=0,
        description="Deadline in seconds for each balance or price request.",
    )
    refresh_interval: float = Field(
        default=DEFAULT_REFRESH_INTERVAL,
        gt=0,
        description="Seconds between two scheduled aggregation cycles.",
    )
    endpoint_overrides: dict[str, str] = Field(default_factory=dict)
    treasury_overrides: dict[str, str] = Field(default_factory=dict)

    # --- prices ---
    coingecko_api_url: str = DEFAULT_COINGECKO_API_URL
    coingecko_api_key: SecretStr | None = None
    coingecko_ids: dict[str, str] = Field(default_factory=dict)
    price_fallback_to_static: bool = False

    # --- bonding curve (from config file only) ---
    pricing: PricingSettings = Field(default_factory=PricingSettings)

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="TREASURY_ORACLE_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("coingecko_api_key", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr."""
        if v is None or isinstance(v, SecretStr):
            return v
        if v == "":
            return None
        return SecretStr(v)

    @field_validator("log_level", mode="after")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def apply_testnet_flag(self) -> "TreasurySettings":
        """Let ``testnet = true`` select the test network."""
        if self.testnet:
            self.network = Network.TESTNET
        return self

    @model_validator(mode="after")
    def validate_price_range(self) -> "TreasurySettings":
        if self.pricing.min_price > self.pricing.max_price:
            raise ValueError(
                f"pricing.min_price ({self.pricing.min_price}) must not exceed "
                f"pricing.max_price ({self.pricing.max_price})"
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get("TREASURY_ORACLE_CONFIG")
        cfg_path = Path(env_cfg) if env_cfg else None

        class TomlConfigSource(PydanticBaseSettingsSource):
            def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
                super().__init__(settings_cls)
                self._path = path

            def get_field_value(
                self, field: Any, field_name: str
            ) -> tuple[Any, str, bool]:
                return None, "", False

            def __call__(self) -> dict[str, Any]:
                if not self._path:
                    local_config = Path("treasury-oracle.toml")
                    user_config = (
                        Path.home() / ".config" / "treasury-oracle" / "config.toml"
                    )
                    if local_config.exists():
                        self._path = local_config
                    elif user_config.exists():
                        self._path = user_config
                    else:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [treasury_oracle]
                body = data.get("treasury_oracle", data)
                if not isinstance(body, dict):
                    return {}

                for key in SECRET_FIELDS:
                    if key in body:
                        raise ValueError(
                            f"Security violation: '{key}' found in TOML config file. "
                            f"Secrets must only be provided via environment variables or CLI flags."
                        )

                return body

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,  # optional secrets dir
        )

    @property
    def is_testnet(self) -> bool:
        return self.network == Network.TESTNET

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the settings as a dict with secrets redacted."""
        data = self.model_dump(mode="json")
        if self.coingecko_api_key:
            data["coingecko_api_key"] = "***redacted***"
        return data
