"""TOML configuration loader."""

from __future__ import annotations

import tomllib
from enum import StrEnum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATHS = [
    Path("vendorscore.toml"),
    Path.home() / ".config" / "vendorscore" / "config.toml",
    Path("/etc/vendorscore/config.toml"),
]


class ReportFormat(StrEnum):
    TERMINAL = "terminal"
    MARKDOWN = "markdown"
    JSON = "json"


class AppConfig(BaseModel):
    """Settings shared by every vendorscore command."""

    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".local" / "share" / "vendorscore",
        description="Directory holding the vendor store",
    )
    format: ReportFormat = Field(default=ReportFormat.TERMINAL, description="Report output format")
    output: str | None = Field(default=None, description="Output file path")
    sort: Literal["score", "name", "id"] = Field(default="score", description="Vendor list order")
    log_level: str = Field(default="WARNING")

    @property
    def store_path(self) -> Path:
        return self.data_dir / "vendors.json"


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from TOML file, falling back to defaults."""
    if config_path and config_path.exists():
        return _parse_toml(config_path)

    for path in DEFAULT_CONFIG_PATHS:
        if path.exists():
            return _parse_toml(path)

    return AppConfig()


def _parse_toml(path: Path) -> AppConfig:
    data = tomllib.loads(path.read_text())
    app_data = data.get("vendorscore", {})
    return AppConfig(**app_data)
