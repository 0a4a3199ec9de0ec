"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest

from freetime.config import AppConfig, GoogleConfig, WorkHoursConfig


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        config = AppConfig()
        window = config.get_work_window()

        assert config.timezone == "Asia/Tokyo"
        assert (window.start_minutes, window.end_minutes) == (600, 1140)
        assert window.min_slot_minutes == 60
        assert window.exclude_weekdays == (5, 6)
        assert config.work_hours.horizon_days == 7

    def test_load_from_yaml(self, tmp_path):
        path = _write(
            tmp_path,
            "timezone: Europe/Berlin\n"
            "work_hours:\n  start_hour: 9\n  end_hour: 17\n"
            "google:\n  calendar_ids: [a@example.com, b@example.com]\n",
        )

        config = AppConfig.load_from_yaml(path)

        assert config.timezone == "Europe/Berlin"
        assert config.get_work_window().start_minutes == 540
        assert config.google.calendar_ids == ["a@example.com", "b@example.com"]

    def test_load_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = _write(tmp_path, "timezone: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(path)

    def test_non_mapping_yaml(self, tmp_path):
        path = _write(tmp_path, "- a\n- b\n")

        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(path)

    def test_load_without_file_uses_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SLACK_SIGNING_SECRET", "secret")
        monkeypatch.setenv("GOOGLE_SERVICE_ACCOUNT_EMAIL", "bot@example.iam.gserviceaccount.com")
        monkeypatch.setenv("GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY", "key")
        monkeypatch.setenv("GOOGLE_CALENDAR_IDS", "a@example.com, b@example.com,,")
        monkeypatch.setenv("ENVIRONMENT", "production")

        config = AppConfig.load(tmp_path / "missing.yaml")

        assert config.slack.signing_secret == "secret"
        assert config.google.calendar_ids == ["a@example.com", "b@example.com"]
        assert config.google.is_configured()
        assert config.environment == "production"
        assert config.is_production()

    def test_environment_overrides_yaml(self, tmp_path, monkeypatch):
        path = _write(
            tmp_path,
            "environment: staging\n"
            "log_level: debug\n"
            "slack:\n  signing_secret: from-file\n"
            "google:\n  service_account_email: file@example.com\n",
        )
        monkeypatch.setenv("SLACK_SIGNING_SECRET", "from-env")
        monkeypatch.setenv("ENVIRONMENT", "production")

        config = AppConfig.load(path)

        assert config.slack.signing_secret == "from-env"
        assert config.environment == "production"
        assert config.log_level == "DEBUG"
        assert config.google.service_account_email == "file@example.com"

    def test_prefixed_environment_variables(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FREETIME_TIMEZONE", "Europe/Berlin")
        monkeypatch.setenv("FREETIME_LOG_LEVEL", "warning")

        config = AppConfig.load(tmp_path / "missing.yaml")

        assert config.timezone == "Europe/Berlin"
        assert config.log_level == "WARNING"

    def test_empty_environment_values_are_ignored(self, tmp_path, monkeypatch):
        path = _write(tmp_path, "timezone: Europe/Berlin\n")
        monkeypatch.setenv("FREETIME_TIMEZONE", "")

        config = AppConfig.load(path)

        assert config.timezone == "Europe/Berlin"

    def test_invalid_environment_value_is_rejected(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FREETIME_TIMEZONE", "Mars/Olympus_Mons")

        with pytest.raises(ValueError, match="Unknown timezone"):
            AppConfig.load(tmp_path / "missing.yaml")

    def test_unknown_timezone(self):
        with pytest.raises(ValueError, match="Unknown timezone"):
            AppConfig(timezone="Mars/Olympus_Mons")

    def test_log_level_is_normalized(self):
        assert AppConfig(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValueError):
            AppConfig(log_level="chatty")

    def test_exclude_days(self):
        assert AppConfig(exclude_days=[6, 5, 6]).exclude_days == [6, 5]
        with pytest.raises(ValueError, match="between 0 and 6"):
            AppConfig(exclude_days=[7])


class TestWorkHoursConfig:
    """Tests for WorkHoursConfig validation."""

    def test_end_before_start(self):
        with pytest.raises(ValueError, match="end_hour must be later"):
            WorkHoursConfig(start_hour=19, end_hour=10)

    def test_hour_out_of_range(self):
        with pytest.raises(ValueError, match="between 0 and 24"):
            WorkHoursConfig(end_hour=25)

    def test_negative_horizon(self):
        with pytest.raises(ValueError):
            WorkHoursConfig(horizon_days=-1)


class TestGoogleConfig:
    """Tests for GoogleConfig."""

    def test_not_configured_without_calendars(self):
        config = GoogleConfig(service_account_email="bot@example.com", service_account_private_key="key")

        assert not config.is_configured()

    def test_calendar_ids_deduplicated(self):
        config = GoogleConfig(calendar_ids=["a@example.com", " a@example.com ", "b@example.com"])

        assert config.calendar_ids == ["a@example.com", "b@example.com"]
