"""
Configuration management for Rotatonator.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .core.data import RosterConfig, check_chain_interval


@dataclass
class PathsConfig:
    log_dir: Path
    log_file: Optional[Path] = None


@dataclass
class RotationSettings:
    healers: list[str] = field(default_factory=list)
    player_name: str = ""
    chain_prefix: str = "D&D"
    chain_interval: float = 6.0
    marker_keyword: str = "CH"
    import_keyword: str = "Rotatonator"
    display_horizon_seconds: float = 10.0


@dataclass
class AutoCastConfig:
    enabled: bool = False
    hotkey: str = "1"


@dataclass
class WatcherConfig:
    poll_interval_ms: int = 100


@dataclass
class ScoringConfig:
    enabled: bool = False


@dataclass
class LoggingConfig:
    level: str = "info"

    LEVELS = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }

    @property
    def level_value(self) -> int:
        return self.LEVELS.get(self.level.lower(), logging.INFO)


@dataclass
class Config:
    """Main configuration container."""

    paths: PathsConfig
    server: Optional[str]
    rotation: RotationSettings
    auto_cast: AutoCastConfig
    watcher: WatcherConfig
    scoring: ScoringConfig
    logging: LoggingConfig

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> Config:
        """Load configuration from JSON file."""
        if config_path is None:
            # Look in standard locations
            candidates = [
                Path.cwd() / "config.json",
                Path.home() / ".config" / "rotatonator" / "config.json",
                Path(__file__).parent.parent / "config.json",
            ]
            for path in candidates:
                if path.exists():
                    config_path = path
                    break

        if config_path is None or not config_path.exists():
            raise FileNotFoundError(
                "No config.json found. Please create one from config.example.json"
            )

        with open(config_path, "r") as f:
            data = json.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        """Parse configuration from dictionary."""
        paths_data = data.get("paths", {})
        log_file = paths_data.get("log_file")
        paths = PathsConfig(
            log_dir=Path(paths_data.get("log_dir", ".")).expanduser(),
            log_file=Path(log_file).expanduser() if log_file else None,
        )

        rotation_data = data.get("rotation", {})
        rotation = RotationSettings(
            healers=[h.strip() for h in rotation_data.get("healers", []) if h.strip()],
            player_name=rotation_data.get("player_name", ""),
            chain_prefix=rotation_data.get("chain_prefix", "D&D"),
            chain_interval=float(rotation_data.get("chain_interval", 6.0)),
            marker_keyword=rotation_data.get("marker_keyword", "CH"),
            import_keyword=rotation_data.get("import_keyword", "Rotatonator"),
            display_horizon_seconds=float(rotation_data.get("display_horizon_seconds", 10.0)),
        )
        check_chain_interval(rotation.chain_interval)

        return cls(
            paths=paths,
            server=data.get("server"),
            rotation=rotation,
            auto_cast=AutoCastConfig(**data.get("auto_cast", {})),
            watcher=WatcherConfig(**data.get("watcher", {})),
            scoring=ScoringConfig(**data.get("scoring", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )

    def roster(self) -> RosterConfig:
        """Build a fresh live roster from the configured rotation."""
        return RosterConfig(
            healers=list(self.rotation.healers),
            player_name=self.rotation.player_name,
            chain_interval=self.rotation.chain_interval,
            chain_prefix=self.rotation.chain_prefix,
            marker_keyword=self.rotation.marker_keyword,
            import_keyword=self.rotation.import_keyword,
            display_horizon=self.rotation.display_horizon_seconds,
            auto_cast=self.auto_cast.enabled,
            cast_hotkey=self.auto_cast.hotkey,
        )
