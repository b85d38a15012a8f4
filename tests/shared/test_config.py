# tests/shared/test_config.py
import pytest
from pydantic import ValidationError

from cleanweb.shared.config import AppEnv, LogFormat, Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # Keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)
    for name in ("APP_ENV", "HTTPS_PORT", "SEED_PRODUCTS", "LOG_FORMAT", "HSTS_EXCLUDED_HOSTS"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.APP_ENV == AppEnv.PRODUCTION
        assert not settings.is_development
        assert settings.HTTPS_PORT is None
        assert settings.HTTPS_REDIRECT_STATUS_CODE == 307
        assert settings.HSTS_MAX_AGE_SECONDS == 2592000
        assert settings.HSTS_EXCLUDED_HOSTS == ["localhost", "127.0.0.1", "[::1]"]
        assert settings.ERROR_PATH == "/Error"
        assert settings.LOG_FORMAT == LogFormat.CONSOLE

    def test_static_root_points_at_packaged_assets(self):
        settings = Settings()
        assert settings.STATIC_ROOT.endswith("wwwroot")

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "development")
        monkeypatch.setenv("HTTPS_PORT", "8443")
        monkeypatch.setenv("SEED_PRODUCTS", '["Desk", "Chair"]')

        settings = Settings()

        assert settings.is_development
        assert settings.HTTPS_PORT == 8443
        assert settings.SEED_PRODUCTS == ["Desk", "Chair"]

    def test_dotenv_file_is_read(self, tmp_path):
        (tmp_path / ".env").write_text("LOG_FORMAT=json\nUNRELATED_KEY=1\n")
        assert Settings().LOG_FORMAT == LogFormat.JSON

    def test_unknown_environment_is_rejected(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "qa")
        with pytest.raises(ValidationError):
            Settings()
