import json
from pathlib import Path

import pytest

from apklens.utils import config
from apklens.utils.decoder import AAPT2_ENV_VAR, decoder_candidates


@pytest.fixture
def config_file(monkeypatch, tmp_path: Path) -> Path:
    path = tmp_path / "config.json"
    monkeypatch.setattr(config, "CONFIG_FILE", path)
    config.reload_config()
    yield path
    config.reload_config()


def test_missing_file_is_empty(config_file: Path) -> None:
    assert config.load_config() == {}
    assert config.get_config_value("aapt2_path", "fallback") == "fallback"


def test_values_are_cached_until_reload(config_file: Path) -> None:
    config_file.write_text(json.dumps({"aapt2_path": "/first/aapt2"}))
    config.reload_config()
    assert config.get_config_value("aapt2_path") == "/first/aapt2"

    config_file.write_text(json.dumps({"aapt2_path": "/second/aapt2"}))
    assert config.get_config_value("aapt2_path") == "/first/aapt2"

    config.reload_config()
    assert config.get_config_value("aapt2_path") == "/second/aapt2"


def test_malformed_file_is_ignored(config_file: Path) -> None:
    config_file.write_text("{not json")
    config.reload_config()

    assert config.load_config() == {}


def test_config_path_feeds_decoder_lookup(config_file: Path, monkeypatch) -> None:
    monkeypatch.delenv(AAPT2_ENV_VAR, raising=False)
    config_file.write_text(json.dumps({"aapt2_path": "/opt/tools/aapt2"}))
    config.reload_config()

    assert decoder_candidates()[0] == Path("/opt/tools/aapt2")
