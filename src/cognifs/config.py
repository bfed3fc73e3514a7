"""Configuration management for cognifs."""

import os
import tomllib
from pathlib import Path
from typing import Any, Dict, FrozenSet, Literal, Optional, Tuple

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cognifs import constants

ENV_PREFIX = "COGNIFS_"
DATA_DIR_NAME = "data"
INDEX_FILE_NAME = "index.json"
WATCH_STATUS_NAME = "watch-status.json"

CONFIG_SEARCH_PATHS = (
    Path("config/settings.toml"),
    Path.home() / ".config" / "cognifs" / "settings.toml",
)

# TOML sections whose keys map straight onto config fields
FLAT_SECTIONS = {"cognifs", "organizer", "scanner", "sync", "providers"}


class CognifsConfig(BaseSettings):
    """Immutable configuration passed to every cognifs component."""

    home: Path = Field(
        default_factory=lambda: Path.home() / ".cognifs",
        description="Base path for the index file, logs and watch status",
    )

    # protection
    vcs_markers: FrozenSet[str] = constants.VCS_MARKERS
    protected_dir_markers: FrozenSet[str] = constants.PROTECTED_DIR_MARKERS
    bundle_suffixes: Tuple[str, ...] = constants.BUNDLE_SUFFIXES
    project_bundle_suffixes: Tuple[str, ...] = constants.PROJECT_BUNDLE_SUFFIXES
    installer_suffixes: Tuple[str, ...] = constants.INSTALLER_SUFFIXES
    project_manifests: FrozenSet[str] = constants.PROJECT_MANIFESTS
    ignore_names: FrozenSet[str] = constants.IGNORED_NAMES
    index_protected: bool = True

    # scanning
    hash_chunk_size: int = Field(default=64 * 1024, gt=0)
    scan_workers: int = Field(default=8, gt=0)

    # clustering and naming
    min_cluster_size: int = Field(default=2, ge=1)
    fallback_cluster: str = "misc"
    similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    embedding_margin: float = Field(default=0.05, ge=0.0)
    folder_separator: Literal["-", "_"] = "-"
    max_folder_name_length: int = Field(default=48, ge=8)

    # moving
    move_workers: int = Field(default=4, gt=0)
    skip_confirmation: bool = False
    dry_run_default: bool = False

    # providers
    tag_provider: Literal["dictionary", "ollama"] = "dictionary"
    embedding_provider: Literal["none", "ollama"] = "none"
    index_backend: Literal["json", "meilisearch"] = "json"
    provider_concurrency: int = Field(default=8, gt=0)
    provider_timeout: float = Field(default=30.0, gt=0)
    max_content_bytes: int = Field(default=64 * 1024, gt=0)

    index_path: Optional[Path] = None
    meilisearch_url: str = "http://127.0.0.1:7700"
    meilisearch_api_key: Optional[str] = None
    meilisearch_index_name: str = "cognifs"
    ollama_url: str = "http://127.0.0.1:11434"
    ollama_model: str = "nomic-embed-text"
    ollama_dims: int = 768
    ollama_tag_model: str = "llama3.2"

    # watching and logging
    sync_delay: int = Field(default=1000, description="Watch debounce in milliseconds")
    log_level: str = "INFO"
    log_file: str = "cognifs.log"

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
        frozen=True,
    )

    @property
    def index_file(self) -> Path:
        """Location of the JSON index."""
        return self.index_path or self.home / DATA_DIR_NAME / INDEX_FILE_NAME

    @property
    def watch_status_path(self) -> Path:
        return self.home / WATCH_STATUS_NAME

    @field_validator("home")
    @classmethod
    def ensure_path_exists(cls, v: Path) -> Path:
        """Ensure home path exists."""
        v = v.expanduser()
        if not v.exists():
            v.mkdir(parents=True)
        return v

    @field_validator("fallback_cluster")
    @classmethod
    def validate_fallback(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("fallback_cluster must be a non-empty name")
        return v.strip()


def find_config_file() -> Optional[Path]:
    """Return the first settings.toml found in the default locations."""
    for path in CONFIG_SEARCH_PATHS:
        if path.exists():
            return path
    return None


def flatten_settings(data: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten TOML sections into config field names.

    `[meilisearch] url = ...` becomes `meilisearch_url`, while keys under the
    general sections (`[organizer]`, `[sync]`, ...) keep their own name.
    """
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                name = sub_key if key in FLAT_SECTIONS else f"{key}_{sub_key}"
                flat[name] = sub_value
        else:
            flat[key] = value
    return flat


def load_config(path: Optional[Path] = None) -> CognifsConfig:
    """Load configuration from a settings file, with environment overrides.

    Args:
        path: settings.toml to read. Defaults to the first file found in
            CONFIG_SEARCH_PATHS; without one only env/defaults apply.

    Returns:
        The merged, frozen configuration
    """
    path = path or find_config_file()
    if path is None:
        return CognifsConfig()

    logger.debug(f"Loading config from {path}")
    with path.open("rb") as f:
        values = flatten_settings(tomllib.load(f))

    # Environment variables win over the file
    env_keys = {key.upper() for key in os.environ}
    values = {k: v for k, v in values.items() if f"{ENV_PREFIX}{k}".upper() not in env_keys}
    return CognifsConfig(**values)
