"""Tests for Settings parsing."""

from src.core.config import Settings


class TestSettings:
    """Tests for Settings validators and defaults."""

    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.report_sheet_name == "Datos"
        assert s.report_default_filename == "reporte"
        assert s.report_table_filename == "tabla"
        assert s.is_production is False

    def test_cors_from_comma_string(self):
        s = Settings(_env_file=None, cors_allowed_origins="http://a.test, http://b.test,")
        assert s.cors_allowed_origins == ["http://a.test", "http://b.test"]

    def test_log_level_normalized(self):
        s = Settings(_env_file=None, log_level=" debug ")
        assert s.log_level == "DEBUG"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("REPORT_SHEET_NAME", "Titulados")
        monkeypatch.setenv("APP_ENV", "production")
        s = Settings(_env_file=None)
        assert s.report_sheet_name == "Titulados"
        assert s.is_production is True
