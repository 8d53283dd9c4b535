"""Configuration system for pcdistance.
Supports TOML configuration files with project-level and user-level settings.
"""
from __future__ import annotations
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO
from pcdistance.fitness.similarity import SimilarityTransform, get_transform
from pcdistance.logging import DistanceLogger, LogLevel, configure_logging, get_logger
CONFIG_FILES = [
    "pcdistance.toml",
    ".pcdistance.toml",
    "pyproject.toml",
]
@dataclass
class EvaluationConfig:
    """Configuration for distance evaluation."""
    similarity: str = "reciprocal"
    max_workers: int = 4
    def transform(self) -> SimilarityTransform:
        """The distance-to-similarity transform named by ``similarity``."""
        return get_transform(self.similarity)
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "similarity": self.similarity,
            "max_workers": self.max_workers,
        }
@dataclass
class CacheConfig:
    """Configuration for the similarity cache."""
    enabled: bool = True
    max_size: int = 100_000
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "enabled": self.enabled,
            "max_size": self.max_size,
        }
@dataclass
class LoggingConfig:
    """Configuration for log output."""
    level: str = "normal"
    color: bool = True
    def log_level(self) -> LogLevel:
        return LogLevel.parse(self.level)
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "level": self.level,
            "color": self.color,
        }
@dataclass
class DistanceConfig:
    """Main configuration for pcdistance."""
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    project_root: Path | None = None
    config_file: Path | None = None
    def validate(self) -> None:
        """Reject values no evaluation could run with.
        Raises:
            ValueError: On an unknown transform or log level, or a
                non-positive worker count or cache size.
        """
        get_transform(self.evaluation.similarity)
        if self.evaluation.max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {self.evaluation.max_workers}")
        if self.cache.max_size < 1:
            raise ValueError(f"cache max_size must be positive, got {self.cache.max_size}")
        self.logging.log_level()
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "evaluation": self.evaluation.to_dict(),
            "cache": self.cache.to_dict(),
            "logging": self.logging.to_dict(),
        }
    def to_toml(self) -> str:
        """Generate TOML configuration string."""
        lines = ["[tool.pcdistance]", ""]
        for section, values in self.to_dict().items():
            lines.append(f"[tool.pcdistance.{section}]")
            for key, value in values.items():
                if isinstance(value, bool):
                    lines.append(f"{key} = {str(value).lower()}")
                elif isinstance(value, str):
                    lines.append(f'{key} = "{value}"')
                else:
                    lines.append(f"{key} = {value}")
            lines.append("")
        return "\n".join(lines)
def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find configuration file by walking up directory tree.
    A ``pyproject.toml`` only counts when it has a ``[tool.pcdistance]`` table.
    """
    if start_dir is None:
        start_dir = Path.cwd()
    current = start_dir.resolve()
    while current != current.parent:
        for config_name in CONFIG_FILES:
            config_path = current / config_name
            if config_path.exists() and (
                config_name != "pyproject.toml" or _has_tool_table(config_path)
            ):
                return config_path
        current = current.parent
    home = Path.home()
    for config_name in [".pcdistance.toml", "pcdistance.toml"]:
        config_path = home / config_name
        if config_path.exists():
            return config_path
    return None
def _has_tool_table(path: Path) -> bool:
    try:
        with open(path, "rb") as f:
            return "pcdistance" in tomllib.load(f).get("tool", {})
    except (OSError, tomllib.TOMLDecodeError):
        return False
def load_config(
    config_path: Path | None = None,
    start_dir: Path | None = None,
    apply: bool = False,
) -> DistanceConfig:
    """Load configuration from file or use defaults.
    Args:
        config_path: Explicit path to config file
        start_dir: Directory to start searching for config
        apply: Also install the global logger from the [logging] section
    Returns:
        Loaded configuration
    """
    config = _read_config(config_path, start_dir)
    if apply:
        apply_logging(config)
    return config
def apply_logging(config: DistanceConfig, stream: TextIO | None = None) -> DistanceLogger:
    """Install the global logger described by the [logging] section."""
    return configure_logging(
        level=config.logging.log_level(), color=config.logging.color, stream=stream
    )
def _read_config(config_path: Path | None, start_dir: Path | None) -> DistanceConfig:
    config = DistanceConfig()
    if config_path is None:
        config_path = find_config_file(start_dir)
    if config_path is None or not config_path.exists():
        return config
    config.config_file = config_path
    config.project_root = config_path.parent
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        get_logger().warning(f"Failed to parse config file {config_path}: {e}")
        return config
    if config_path.name == "pyproject.toml":
        section_data = data.get("tool", {}).get("pcdistance", {})
    else:
        section_data = data.get("tool", {}).get("pcdistance", data)
    _apply_config(config, section_data)
    return config
def _apply_config(config: DistanceConfig, data: dict[str, Any]) -> None:
    """Apply configuration data to config object."""
    if "evaluation" in data:
        eval_data = data["evaluation"]
        if "similarity" in eval_data:
            config.evaluation.similarity = str(eval_data["similarity"])
        if "max_workers" in eval_data:
            config.evaluation.max_workers = int(eval_data["max_workers"])
    if "cache" in data:
        cache_data = data["cache"]
        if "enabled" in cache_data:
            config.cache.enabled = bool(cache_data["enabled"])
        if "max_size" in cache_data:
            config.cache.max_size = int(cache_data["max_size"])
    if "logging" in data:
        log_data = data["logging"]
        if "level" in log_data:
            config.logging.level = str(log_data["level"])
        if "color" in log_data:
            config.logging.color = bool(log_data["color"])
    config.validate()
def generate_default_config() -> str:
    """Generate default configuration file content."""
    config = DistanceConfig()
    return config.to_toml()
def init_config(directory: Path | None = None) -> Path:
    """Initialize a new configuration file in the given directory.
    Args:
        directory: Directory to create config in (default: current)
    Returns:
        Path to created config file
    """
    if directory is None:
        directory = Path.cwd()
    config_path = directory / "pcdistance.toml"
    if config_path.exists():
        raise FileExistsError(f"Config file already exists: {config_path}")
    content = generate_default_config()
    config_path.write_text(content, encoding="utf-8")
    return config_path
__all__ = [
    "DistanceConfig",
    "EvaluationConfig",
    "CacheConfig",
    "LoggingConfig",
    "load_config",
    "apply_logging",
    "find_config_file",
    "generate_default_config",
    "init_config",
]
