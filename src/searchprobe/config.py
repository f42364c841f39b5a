"""Configuration management using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from searchprobe.errors import ConfigurationError

BackendKind = Literal["manticore", "sphinx"]

# Retry policy and pacing
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_SECONDS = 2.0
DEFAULT_INTER_QUERY_DELAY_SECONDS = 0.5


class BackendConfig(BaseModel):
    """Immutable connection details for one search backend."""

    model_config = ConfigDict(frozen=True)

    kind: BackendKind
    index_name: str = "documents"
    base_url: str | None = None  # manticore
    host: str | None = None  # sphinx
    port: int | None = None

    @property
    def backend_id(self) -> str:
        if self.kind == "manticore":
            return f"manticore-http:{self.base_url}/{self.index_name}"
        return f"sphinx-sql:{self.host}:{self.port}/{self.index_name}"


class QualityThresholds(BaseModel):
    """Cutoffs and category scores used by the quality heuristic."""

    model_config = ConfigDict(frozen=True)

    excellent_min_top_score: float = 0.5
    good_min_top_score: float = 0.3
    excellent_score: int = Field(default=90, ge=0, le=100)
    good_score: int = Field(default=70, ge=0, le=100)
    fair_score: int = Field(default=50, ge=0, le=100)
    poor_score: int = Field(default=0, ge=0, le=100)


_THRESHOLD_DEFAULTS = QualityThresholds()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SEARCHPROBE_",
        env_file=(".env", "configs/connection.conf"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Backend
    backend: BackendKind = "manticore"
    base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SEARCHPROBE_BASE_URL", "BASE_URL"),
    )
    index_name: str = "documents"
    sql_host: str = "127.0.0.1"
    sql_port: int | None = None

    # Execution
    default_limit: int = 10
    timeout_seconds: int = 30
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS
    inter_query_delay_seconds: float = DEFAULT_INTER_QUERY_DELAY_SECONDS

    # Scoring
    excellent_min_top_score: float = _THRESHOLD_DEFAULTS.excellent_min_top_score
    good_min_top_score: float = _THRESHOLD_DEFAULTS.good_min_top_score
    excellent_score: int = _THRESHOLD_DEFAULTS.excellent_score
    good_score: int = _THRESHOLD_DEFAULTS.good_score
    fair_score: int = _THRESHOLD_DEFAULTS.fair_score
    poor_score: int = _THRESHOLD_DEFAULTS.poor_score

    # Reports
    output_dir: Path = Path("output")
    top_n: int = 5

    def backend_config(self) -> BackendConfig:
        """Build the backend connection value, failing on missing details."""
        if self.backend == "manticore":
            if not self.base_url:
                raise ConfigurationError(
                    "Manticore base URL is not configured",
                    details={"hint": "set SEARCHPROBE_BASE_URL or BASE_URL"},
                )
            return BackendConfig(
                kind="manticore",
                index_name=self.index_name,
                base_url=self.base_url.rstrip("/"),
            )

        if not self.sql_host or not self.sql_port:
            raise ConfigurationError(
                "Sphinx SQL host/port are not configured",
                details={"hint": "set SEARCHPROBE_SQL_HOST and SEARCHPROBE_SQL_PORT"},
            )
        return BackendConfig(
            kind="sphinx",
            index_name=self.index_name,
            host=self.sql_host,
            port=self.sql_port,
        )

    def thresholds(self) -> QualityThresholds:
        return QualityThresholds(
            excellent_min_top_score=self.excellent_min_top_score,
            good_min_top_score=self.good_min_top_score,
            excellent_score=self.excellent_score,
            good_score=self.good_score,
            fair_score=self.fair_score,
            poor_score=self.poor_score,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
