import logging
import tomllib
from pathlib import Path

import tomlkit
from pydantic import BaseModel, HttpUrl, NonNegativeInt, PositiveInt, WebsocketUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from flashswap.logging import logger
from flashswap.types.aliases import ChainId

CONFIG_DIR = Path.home() / ".config" / "flashswap"
CONFIG_FILE = CONFIG_DIR / "config.toml"


class SettlementSettings(BaseModel):
    default_min_profit: NonNegativeInt = 1
    max_input: PositiveInt | None = None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FLASHSWAP_",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    settlement: SettlementSettings = SettlementSettings()
    rpc: dict[
        ChainId,
        HttpUrl | WebsocketUrl | Path,
    ] = {}

    @field_validator("log_level", mode="after")
    def validate_log_level(
        cls,  # noqa: N805
        level: str,
    ) -> str:
        level = level.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level {level!r}")
        return level

    @field_validator("rpc", mode="after")
    def validate_paths(
        cls,  # noqa: N805
        rpc_dict: dict[ChainId, HttpUrl | WebsocketUrl | Path],
    ) -> dict[ChainId, HttpUrl | WebsocketUrl | Path]:
        """
        Validate the endpoints.

        This will convert all file paths to an absolute reference, leaving HTTP and WS URLs as-is.
        """

        return {
            chain_id: endpoint.expanduser().absolute() if isinstance(endpoint, Path) else endpoint
            for chain_id, endpoint in rpc_dict.items()
        }


def load_config_from_file(config_path: Path) -> Settings:
    # Values from the file are passed as init arguments, so they take priority over the
    # environment
    return Settings(
        **tomllib.loads(
            config_path.read_text(),
        ),
    )


def dump_config(config: Settings) -> dict:
    # TOML has no null and requires string keys, so dump in JSON mode and drop unset options
    return config.model_dump(mode="json", exclude_none=True)


def save_config_to_file(config: Settings, config_path: Path | None = None) -> Path:
    if config_path is None:
        config_path = CONFIG_FILE

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        tomlkit.dumps(
            dump_config(config),
        ),
    )
    return config_path


def apply_log_level(config: Settings) -> None:
    logger.setLevel(config.log_level)


if CONFIG_FILE.exists():
    settings = load_config_from_file(CONFIG_FILE)
else:
    settings = Settings()

apply_log_level(settings)
