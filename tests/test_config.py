"""
Test Configuration Loading
"""

import pytest

from jobboard_authz.config import AppConfig, load_config
from jobboard_authz.config.loader import interpolate_env_vars, load_config_from_file
from jobboard_authz.server import create_store_client


class TestInterpolation:

    def test_set_variable(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://db.example.com")
        assert interpolate_env_vars("${SUPABASE_URL}") == "https://db.example.com"

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("AUTHZ_TRUST_HEADERS", raising=False)
        assert interpolate_env_vars("${AUTHZ_TRUST_HEADERS:-false}") == "false"

    def test_required_variable_missing(self, monkeypatch):
        monkeypatch.delenv("SUPABASE_KEY", raising=False)
        with pytest.raises(KeyError, match="SUPABASE_KEY"):
            interpolate_env_vars({"storage": {"key": "${SUPABASE_KEY}"}})

    def test_nested_structures(self, monkeypatch):
        monkeypatch.setenv("ORIGIN", "https://jobs.example.com")
        result = interpolate_env_vars({"cors_origins": ["${ORIGIN}", "http://localhost"], "port": 8000})
        assert result == {"cors_origins": ["https://jobs.example.com", "http://localhost"], "port": 8000}


class TestAppConfig:

    def test_defaults(self):
        config = AppConfig()
        assert config.storage.is_memory
        assert config.auth.trust_headers is False
        assert config.server.api_prefix == "/api/v1"

    def test_from_dict(self):
        config = AppConfig.from_dict({
            "service": {"name": "authz-staging"},
            "server": {"port": "9000", "api_prefix": "/api"},
            "storage": {"type": "supabase", "url": "https://db", "key": "secret"},
            "auth": {"trust_headers": "true"},
            "logging": {"level": "debug"},
        })
        assert config.name == "authz-staging"
        assert config.server.port == 9000
        assert config.server.api_prefix == "/api"
        assert config.storage.type == "supabase"
        assert config.auth.trust_headers is True
        assert config.logging.level == "DEBUG"

    def test_to_dict_masks_key(self):
        config = AppConfig.from_dict({"storage": {"type": "supabase", "url": "https://db", "key": "secret"}})
        assert config.to_dict()["storage"]["key"] == "***"


class TestLoadConfig:

    def test_load_from_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AUTHZ_PORT", "8123")
        path = tmp_path / "authz.yaml"
        path.write_text("server:\n  port: ${AUTHZ_PORT}\nauth:\n  trust_headers: yes\n")

        config = load_config_from_file(path)

        assert config.server.port == 8123
        assert config.auth.trust_headers is True

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "authz.yaml"
        path.write_text("")
        assert load_config_from_file(path).server.port == 8000

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_search_working_dir(self, tmp_path, monkeypatch):
        monkeypatch.delenv("AUTHZ_CONFIG", raising=False)
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "authz.yaml").write_text("service:\n  name: from-config-dir\n")

        assert load_config(working_dir=tmp_path).name == "from-config-dir"

    def test_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("service:\n  name: from-env\n")
        monkeypatch.setenv("AUTHZ_CONFIG", str(path))

        assert load_config().name == "from-env"

    def test_defaults_when_nothing_found(self, tmp_path, monkeypatch):
        monkeypatch.delenv("AUTHZ_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        config = load_config(working_dir=tmp_path)
        assert config.name == "jobboard-authz"
        assert config.storage.is_memory


class TestStoreClient:

    def test_memory_has_no_client(self):
        assert create_store_client(AppConfig().storage) is None

    def test_supabase_requires_credentials(self):
        config = AppConfig.from_dict({"storage": {"type": "supabase"}})
        with pytest.raises(ValueError, match="url"):
            create_store_client(config.storage)

    def test_unknown_storage_type(self):
        config = AppConfig.from_dict({"storage": {"type": "redis"}})
        with pytest.raises(ValueError, match="Unknown storage type"):
            create_store_client(config.storage)
