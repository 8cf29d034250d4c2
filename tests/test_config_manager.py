"""配置管理器"""

import json

import pytest

from infrastructure.config.config_manager import ConfigManager
from infrastructure.config.settings import DEFAULT_API_BASE_URL


@pytest.fixture
def config_file(tmp_path):
    return tmp_path / "llm_council" / "config.json"


def test_missing_file_is_created_with_defaults(config_file, monkeypatch):
    monkeypatch.delenv("LLM_COUNCIL_API_URL", raising=False)
    config = ConfigManager(config_file)

    assert config.load_config()
    assert config_file.exists()
    assert config.get_api_base_url() == DEFAULT_API_BASE_URL


def test_corrupt_file_falls_back_to_defaults(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text("{not json", encoding="utf-8")
    config = ConfigManager(config_file)

    assert not config.load_config()
    assert config.is_loaded
    assert config.get("request_timeout") == 30


def test_partial_file_is_merged_with_defaults(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text(json.dumps({"language": "zh_CN"}), encoding="utf-8")
    config = ConfigManager(config_file)
    config.load_config()

    assert config.get("language") == "zh_CN"
    assert config.get_stream_timeout() == 600.0


def test_env_overrides_base_url(config_file, monkeypatch):
    monkeypatch.setenv("LLM_COUNCIL_API_URL", "http://remote:8001/")
    config = ConfigManager(config_file)
    config.load_config()

    assert config.get_api_base_url() == "http://remote:8001"


def test_set_persists_and_notifies(config_file):
    changes = []
    config = ConfigManager(config_file)
    config.load_config()
    config.subscribe_change("language", lambda *args: changes.append(args))

    config.set("language", "zh_CN")
    config.set("language", "zh_CN")

    assert changes == [("language", "en_US", "zh_CN")]
    assert json.loads(config_file.read_text(encoding="utf-8"))["language"] == "zh_CN"


def test_validate_config(config_file):
    config = ConfigManager(config_file)
    config.load_config()
    assert config.validate_config() == (True, [])

    config.set("request_timeout", 0, save=False)
    config.set("api_base_url", "localhost", save=False)
    valid, errors = config.validate_config()

    assert not valid
    assert len(errors) == 2
