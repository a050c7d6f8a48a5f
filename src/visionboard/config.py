"""Visionboard configuration management."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

_SAVED_KEYS = (
    "log_level",
    "wal_mode",
    "revenue_goal",
    "default_project_color",
    "list_limit",
)


@dataclass
class Config:
    """Visionboard configuration."""

    workspace_path: Path = field(default_factory=lambda: Path.home() / ".visionboard")
    log_level: str = "INFO"
    wal_mode: bool = True

    # Annual revenue target shown against current revenue
    revenue_goal: float = 100000.0
    default_project_color: str = "#3b82f6"
    list_limit: int = 50

    @classmethod
    def load(cls, workspace_path: Path | None = None) -> Config:
        """Load config from defaults, env vars, then the workspace YAML file."""
        config = cls()

        if workspace_path:
            config.workspace_path = workspace_path

        env_path = os.environ.get("VISIONBOARD_WORKSPACE")
        if env_path:
            config.workspace_path = Path(env_path)

        env_log = os.environ.get("VISIONBOARD_LOG_LEVEL")
        if env_log:
            config.log_level = env_log

        config_file = config.config_file
        if config_file.exists():
            with open(config_file) as f:
                data = yaml.safe_load(f) or {}
            for key, value in data.items():
                if hasattr(config, key):
                    expected_type = type(getattr(config, key))
                    if expected_type is Path or isinstance(getattr(config, key), Path):
                        setattr(config, key, Path(value))
                    else:
                        setattr(config, key, expected_type(value))

        return config

    @property
    def config_file(self) -> Path:
        return self.workspace_path / "config.yaml"

    @property
    def db_path(self) -> Path:
        return self.workspace_path / "visionboard.db"

    def configure_logging(self) -> None:
        logging.basicConfig(
            level=self.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    def save(self) -> None:
        """Save current config to YAML."""
        self.workspace_path.mkdir(parents=True, exist_ok=True)
        data = {key: getattr(self, key) for key in _SAVED_KEYS}
        with open(self.config_file, "w") as f:
            yaml.dump(data, f, default_flow_style=False)
