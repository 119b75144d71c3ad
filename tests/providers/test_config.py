"""Tests for provider configuration loading."""

import pytest

from socials_studio.providers.config import (
    CONFIG_PATH_ENV,
    ProviderConfig,
    TextProviderConfig,
    default_config_path,
    load_provider_config,
)


class TestDefaults:
    """Built-in chains when no YAML file exists."""

    def test_missing_file_falls_back_to_defaults(self, tmp_path):
        config = load_provider_config(tmp_path / "missing.yaml")

        assert [name for name, _ in config.get_text_chain()] == ["g4f", "perplexity", "gemini"]
        assert [name for name, _ in config.get_image_chain()] == ["g4f", "reve"]
        assert [name for name, _ in config.get_vision_chain()] == ["gemini"]
        assert config.provider_settings.timeout_seconds == 60

    def test_shipped_yaml_matches_defaults(self):
        assert default_config_path().exists()
        config = load_provider_config(default_config_path())

        assert config.text_priority_chain == ProviderConfig().text_priority_chain
        assert config.image_priority_chain == ProviderConfig().image_priority_chain
        assert config.text_providers["reve"].enabled is False


class TestYamlLoading:
    """Custom providers.yaml files."""

    def test_priority_chain_orders_and_filters(self, tmp_path):
        path = tmp_path / "providers.yaml"
        path.write_text(
            "text_priority_chain: [gemini, ghost, g4f]\n"
            "text_providers:\n"
            "  g4f:\n"
            "    type: chat_completions\n"
            "    model: gpt-4o\n"
            "    base_url: https://g4f.test\n"
            "  gemini:\n"
            "    type: gemini\n"
            "    model: gemini-2.5-flash\n"
            "  retired:\n"
            "    type: gemini\n"
            "    model: x\n"
            "    enabled: false\n",
            encoding="utf-8",
        )

        config = load_provider_config(path)

        assert [name for name, _ in config.get_text_chain()] == ["gemini", "g4f"]

    def test_empty_chain_uses_definition_order_and_skips_disabled(self):
        config = ProviderConfig(
            text_priority_chain=[],
            text_providers={
                "b": TextProviderConfig(type="gemini", model="m"),
                "a": TextProviderConfig(type="gemini", model="m", enabled=False),
                "c": TextProviderConfig(type="gemini", model="m"),
            },
        )

        assert [name for name, _ in config.get_text_chain()] == ["b", "c"]

    def test_env_var_selects_config_file(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("provider_settings:\n  timeout_seconds: 12\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_PATH_ENV, str(path))

        assert load_provider_config().provider_settings.timeout_seconds == 12

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_provider_config(path).image_priority_chain == ["g4f", "reve"]


class TestEndpointResolution:
    """Credentials, base URL and model overrides come from the environment."""

    def test_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv("TEST_KEY_ENV", "secret")
        entry = TextProviderConfig(type="gemini", model="m", api_key_env="TEST_KEY_ENV")
        assert entry.get_api_key() == "secret"

    def test_blank_env_key_counts_as_missing(self, monkeypatch):
        monkeypatch.setenv("TEST_KEY_ENV", "")
        entry = TextProviderConfig(type="gemini", model="m", api_key_env="TEST_KEY_ENV")
        assert entry.get_api_key() is None

    def test_base_url_env_wins_and_is_normalized(self, monkeypatch):
        monkeypatch.setenv("TEST_BASE_URL", "https://override.test/v1/")
        entry = TextProviderConfig(
            type="chat_completions",
            model="m",
            base_url="https://default.test",
            base_url_env="TEST_BASE_URL",
        )
        assert entry.get_base_url() == "https://override.test/v1"

    @pytest.mark.parametrize("override, expected", [("", "gpt-4o"), ("gpt-4o-mini", "gpt-4o-mini")])
    def test_model_env_override(self, monkeypatch, override, expected):
        monkeypatch.setenv("TEST_MODEL_ENV", override)
        entry = TextProviderConfig(type="chat_completions", model="gpt-4o", model_env="TEST_MODEL_ENV")
        assert entry.get_model() == expected
