"""Tests for settings and backend configuration."""

import pytest
from pydantic import ValidationError

from searchprobe.config import BackendConfig, Settings
from searchprobe.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("BASE_URL", "SEARCHPROBE_BASE_URL", "SEARCHPROBE_BACKEND", "SEARCHPROBE_SQL_PORT"):
        monkeypatch.delenv(name, raising=False)


def test_manticore_requires_base_url():
    with pytest.raises(ConfigurationError, match="base URL"):
        Settings(_env_file=None).backend_config()


def test_plain_base_url_variable_is_honoured(monkeypatch):
    monkeypatch.setenv("BASE_URL", "http://localhost:9308/")
    config = Settings(_env_file=None).backend_config()

    assert config.base_url == "http://localhost:9308"
    assert config.backend_id == "manticore-http:http://localhost:9308/documents"


def test_sphinx_requires_port():
    with pytest.raises(ConfigurationError, match="host/port"):
        Settings(_env_file=None, backend="sphinx").backend_config()


def test_sphinx_from_environment(monkeypatch):
    monkeypatch.setenv("SEARCHPROBE_BACKEND", "sphinx")
    monkeypatch.setenv("SEARCHPROBE_SQL_PORT", "9306")
    config = Settings(_env_file=None).backend_config()

    assert config == BackendConfig(kind="sphinx", host="127.0.0.1", port=9306)


def test_thresholds_follow_settings():
    thresholds = Settings(_env_file=None, excellent_min_top_score=0.8).thresholds()
    assert thresholds.excellent_min_top_score == 0.8
    assert thresholds.good_min_top_score == 0.3


def test_backend_config_is_immutable():
    config = BackendConfig(kind="manticore", base_url="http://x")
    with pytest.raises(ValidationError):
        config.index_name = "other"


def test_category_scores_are_overridable(monkeypatch):
    monkeypatch.setenv("SEARCHPROBE_EXCELLENT_SCORE", "95")
    thresholds = Settings(_env_file=None, fair_score=40).thresholds()

    assert (thresholds.excellent_score, thresholds.good_score) == (95, 70)
    assert (thresholds.fair_score, thresholds.poor_score) == (40, 0)


def test_category_scores_stay_in_range():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, excellent_score=120).thresholds()
