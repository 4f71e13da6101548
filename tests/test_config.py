"""Tests for configuration loading and saving."""

from __future__ import annotations

import yaml

from keepson.config import DEFAULT_OWNER, Config, LLMConfig


class TestConfig:
    """YAML configuration round trips."""

    def test_missing_file_gives_defaults(self, temp_dir):
        config = Config.load(temp_dir / "nope.yaml")

        assert config.default_owner == DEFAULT_OWNER
        assert config.search.default_limit == 20
        assert not config.oracle.enabled
        assert not config.summaries.enabled

    def test_load(self, temp_dir):
        path = temp_dir / "config.yaml"
        path.write_text(yaml.dump({
            "db_path": str(temp_dir / "records.db"),
            "default_owner": "alice",
            "search": {"default_limit": 10, "max_query_length": 200},
            "oracle": {"backend": "anthropic", "model": "claude-3-haiku-20240307", "timeout": 5},
            "tag_aliases": {"js": "javascript"},
        }))

        config = Config.load(path)

        assert config.db_path == temp_dir / "records.db"
        assert config.default_owner == "alice"
        assert config.search.default_limit == 10
        assert config.search.max_limit == 100
        assert config.search.max_query_length == 200
        assert config.oracle.enabled
        assert config.oracle.timeout == 5.0
        assert not config.summaries.enabled
        assert config.tag_aliases == {"js": "javascript"}

    def test_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("KEEPSON_TEST_KEY", "sk-test")

        llm = LLMConfig(backend="openai", model="gpt-4o-mini", api_key="${KEEPSON_TEST_KEY}")

        assert llm.api_key == "sk-test"

    def test_save_round_trip(self, temp_dir):
        path = temp_dir / "sub" / "config.yaml"
        original = Config(
            db_path=temp_dir / "records.db",
            default_owner="bob",
            summaries=LLMConfig(backend="openai", model="gpt-4o-mini"),
        )

        original.save(path)
        loaded = Config.load(path)

        assert loaded.default_owner == "bob"
        assert loaded.summaries.model == "gpt-4o-mini"
        assert "oracle" not in yaml.safe_load(path.read_text())
