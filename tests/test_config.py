import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from flashswap.config import (
    Settings,
    SettlementSettings,
    apply_log_level,
    load_config_from_file,
    save_config_to_file,
)
from flashswap.logging import logger


def test_default_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FLASHSWAP_LOG_LEVEL", raising=False)
    settings = Settings()
    assert settings.log_level == "INFO"
    assert settings.settlement == SettlementSettings(default_min_profit=1, max_input=None)
    assert settings.rpc == {}


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLASHSWAP_LOG_LEVEL", "debug")
    monkeypatch.setenv("FLASHSWAP_SETTLEMENT__DEFAULT_MIN_PROFIT", "5")

    settings = Settings()
    assert settings.log_level == "DEBUG"
    assert settings.settlement.default_min_profit == 5


def test_invalid_settings() -> None:
    with pytest.raises(ValidationError):
        Settings(log_level="LOUD")
    with pytest.raises(ValidationError):
        Settings(settlement={"default_min_profit": -1})
    with pytest.raises(ValidationError):
        Settings(settlement={"max_input": 0})


def test_rpc_paths_are_absolute() -> None:
    settings = Settings(rpc={1: Path("~/ethereum/geth.ipc")})
    endpoint = settings.rpc[1]
    assert isinstance(endpoint, Path)
    assert endpoint.is_absolute()
    assert endpoint == Path.home() / "ethereum" / "geth.ipc"


def test_save_and_load(tmp_path: Path) -> None:
    settings = Settings(
        log_level="WARNING",
        settlement=SettlementSettings(default_min_profit=10, max_input=5_000),
        rpc={1: Path("/tmp/geth.ipc")},
    )
    config_file = save_config_to_file(settings, tmp_path / "flashswap" / "config.toml")

    assert config_file.exists()
    assert "[settlement]" in config_file.read_text()
    assert load_config_from_file(config_file) == settings


def test_save_without_optional_values(tmp_path: Path) -> None:
    settings = Settings(log_level="INFO")
    config_file = save_config_to_file(settings, tmp_path / "config.toml")
    assert "max_input" not in config_file.read_text()
    assert load_config_from_file(config_file).settlement.max_input is None


def test_apply_log_level() -> None:
    original_level = logger.level
    try:
        apply_log_level(Settings(log_level="ERROR"))
        assert logger.level == logging.ERROR
    finally:
        logger.setLevel(original_level)
