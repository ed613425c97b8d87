# Configuration loading tests

import pytest

from utils.config import Config, load_config, validate_config, _replace_env_vars


class TestPlaceholders:
    """Environment placeholder substitution"""

    def test_set_variable_wins(self, monkeypatch):
        monkeypatch.setenv("RESERVE_TEST_VAR", "from-env")
        assert _replace_env_vars("${RESERVE_TEST_VAR:-fallback}") == "from-env"

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("RESERVE_TEST_VAR", raising=False)
        assert _replace_env_vars("${RESERVE_TEST_VAR:-fallback}") == "fallback"
        assert _replace_env_vars("${RESERVE_TEST_VAR:-}") == ""

    def test_unset_without_default_left_as_is(self, monkeypatch):
        monkeypatch.delenv("RESERVE_TEST_VAR", raising=False)
        assert _replace_env_vars("${RESERVE_TEST_VAR}") == "${RESERVE_TEST_VAR}"

    def test_embedded_placeholder(self, monkeypatch):
        monkeypatch.setenv("RESERVE_TEST_HOST", "example.edu")
        assert _replace_env_vars("https://${RESERVE_TEST_HOST}/app") == "https://example.edu/app"


class TestConfig:
    """Config files and validation"""

    def test_development_config_loads(self, monkeypatch):
        monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
        config = Config('development')

        assert config.env == 'development'
        assert config.get('auth.jwt_secret_key') == "development-secret-key"
        assert config.get('genai.model') == "gemini-2.5-flash"
        assert config.get('missing.key', 'default') == 'default'
        assert config.section('genai')['timeout_seconds'] == 20

    def test_production_requires_secret(self, monkeypatch):
        monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
        with pytest.raises(ValueError):
            Config('production')

    def test_production_with_secret(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET_KEY", "prod-secret")
        monkeypatch.setenv("STAFF_PASSWORD", "staff-secret")
        config = Config('production')

        assert config.get('auth.jwt_secret_key') == "prod-secret"
        assert config.get('app.debug') is False

    def test_missing_section_invalid(self):
        config = load_config('development')
        del config['genai']
        assert validate_config(config) is False
