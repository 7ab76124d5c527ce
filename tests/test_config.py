"""Tests for settings and YAML configuration."""

from election_bot.common.enums import ProviderName
from election_bot.config import Settings
from election_bot.core.config import ConfigLoader
from election_bot.core.context import build_context


def test_provider_config_requires_key():
    settings = Settings(_env_file=None, openai_api_key="sk-test", anthropic_api_key="")

    openai_config = settings.provider_config("openai")

    assert openai_config.provider == ProviderName.OPENAI
    assert openai_config.model == "gpt-4o-mini"
    assert openai_config.max_tokens == 2000
    assert "sk-test" not in repr(openai_config)
    assert settings.provider_config("anthropic") is None
    assert settings.provider_config("gemini") is None


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-env")
    monkeypatch.setenv("ANTHROPIC_MODEL", "claude-3-haiku-20240307")
    monkeypatch.setenv("HISTORY_WINDOW", "3")

    settings = Settings(_env_file=None)

    assert settings.provider_config("anthropic").model == "claude-3-haiku-20240307"
    assert settings.history_window == 3
    assert settings.request_timeout == 30.0


def test_config_loader_substitutes_env_vars(tmp_path, monkeypatch):
    monkeypatch.setenv("DATA_FILE", "turnout.json")
    path = tmp_path / "config.yaml"
    path.write_text(
        "election_data:\n"
        "  datasets:\n"
        "    - ${DATA_FILE}\n"
        "    - ${UNSET_VARIABLE_FOR_TEST}\n",
        encoding="utf-8",
    )

    config = ConfigLoader(str(path))

    assert config.get("election_data.datasets") == ["turnout.json", "${UNSET_VARIABLE_FOR_TEST}"]
    assert config.get("election_data.missing", "fallback") == "fallback"
    assert config.get("election_data.datasets.deeper") is None


def test_missing_config_file_uses_defaults(tmp_path):
    config = ConfigLoader(str(tmp_path / "absent.yaml"))

    assert config.get("keyword_filter.blocked_keywords") is None


def test_yaml_overrides_reach_services(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "keyword_filter:\n"
        "  blocked_keywords:\n"
        "    - Exit Poll\n"
        "election_data:\n"
        "  datasets:\n"
        "    - turnout.json\n",
        encoding="utf-8",
    )
    settings = Settings(_env_file=None, openai_api_key="", anthropic_api_key="", data_dir=str(tmp_path))

    context = build_context(settings, ConfigLoader(str(path)))

    assert context.keyword_filter.keywords == ("exit poll",)
    assert context.data_loader.datasets == ("turnout.json",)
    assert context.orchestrator.configured_providers == []


def test_malformed_list_override_is_ignored(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("keyword_filter:\n  blocked_keywords: exit poll\n", encoding="utf-8")

    config = ConfigLoader(str(path))

    assert config.string_list("keyword_filter.blocked_keywords") is None
    assert config.string_list("election_data.datasets") is None


def test_non_mapping_yaml_is_ignored(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    assert ConfigLoader(str(path)).get("keyword_filter") is None
