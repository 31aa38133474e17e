"""
Application configuration for ratingwatch.

Provides environment-aware settings with conservative defaults. Classification
thresholds and policies are configurable to avoid hard-coded "magic numbers".
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaselinePolicy(str, Enum):
	"""Which endpoint statistics an edge is judged against."""

	SOURCE_ONLY = "source_only"
	SOURCE_AND_TARGET = "source_and_target"


class ScopePolicy(str, Enum):
	"""Which slice of the log a new interaction is judged against."""

	INCREMENTAL_HISTORY = "incremental_history"
	FULL_CORPUS = "full_corpus"


class AnomalyThresholds(BaseModel):
	"""
	Thresholds for the rating classifier.

	Rationale:
	- threshold_multiple is a two-sigma rule against the baseline spread.
	- fixed_threshold judges ratings by magnitude when the baseline has no spread.
	"""

	threshold_multiple: float = Field(2.0, ge=0.0, description="Std-dev multiple for dynamic threshold")
	fixed_threshold: float = Field(2.0, ge=0.0, description="Absolute rating bound for zero-spread baselines")


class PolicyConfig(BaseModel):
	"""
	Classification policy selection.

	Notes:
	- baseline: judge edges against the source only, or OR in the target verdict.
	- ingest_scope: judge new interactions against the source history, or the full corpus.
	"""

	baseline: BaselinePolicy = BaselinePolicy.SOURCE_ONLY
	ingest_scope: ScopePolicy = ScopePolicy.INCREMENTAL_HISTORY


class StorageConfig(BaseModel):
	"""
	Sample store configuration.

	Notes:
	- database_url: SQLAlchemy URL; falls back to the plain DATABASE_URL variable.
	- workers: size of the executor that runs blocking storage calls.
	"""

	database_url: Optional[str] = None
	workers: int = Field(4, ge=1)
	echo: bool = False


class RemoteClassifierConfig(BaseModel):
	"""
	Optional remote classification delegate used on the ingest path.
	"""

	enabled: bool = False
	url: Optional[str] = None
	timeout_seconds: float = Field(5.0, gt=0.0)


class ServerConfig(BaseModel):
	"""
	HTTP server settings.
	"""

	host: str = "0.0.0.0"
	port: int = Field(8000, ge=0, le=65535)
	static_dir: Path = Path("static")
	allowed_origins: str = "*"


class Config(BaseSettings):
	"""
	Global configuration with environment overrides.
	"""

	model_config = SettingsConfigDict(
		env_prefix="RATINGWATCH_",
		env_file=".env",
		env_nested_delimiter="__",
		extra="ignore",
	)

	log_level: str = Field("INFO", description="Default logging level")
	logs_dir: Path = Field(Path("logs"), description="Directory for log files")
	thresholds: AnomalyThresholds = AnomalyThresholds()
	policy: PolicyConfig = PolicyConfig()
	storage: StorageConfig = StorageConfig()
	remote: RemoteClassifierConfig = RemoteClassifierConfig()
	server: ServerConfig = ServerConfig()

	def model_post_init(self, __context: object) -> None:
		if not self.storage.database_url:
			self.storage.database_url = os.getenv("DATABASE_URL") or None
		self.logs_dir.mkdir(parents=True, exist_ok=True)


config = Config()
