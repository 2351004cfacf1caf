"""
Global Configuration and Safety Defaults.

Traversal bounds protect the engines from unbounded fan-out on large or
highly connected graphs. Project overrides live in ``.infraview/config.yaml``.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

# --- Traversal Limits ---
# Default depth for blast radius traversal
DEFAULT_BLAST_RADIUS_DEPTH = 10

# Hard ceiling for user supplied depth values
MAX_TRAVERSAL_DEPTH = 20

# Maximum number of nodes in a multi-selection
DEFAULT_MAX_SELECTION = 100

# Maximum number of alternate paths enumerated between two nodes
DEFAULT_MAX_PATHS = 10

# --- Rendering ---
DIMMED_EDGE_OPACITY = 0.3
DEFAULT_EDGE_OPACITY = 1.0

MAX_SEARCH_LENGTH = 200

# --- Layout ---
DEFAULT_NODE_WIDTH = 200
DEFAULT_NODE_HEIGHT = 60
DEFAULT_NODE_SPACING = 80

# --- Action log ---
MAX_ACTION_HISTORY = 1000

CONFIG_DIR = ".infraview"
CONFIG_FILE = "config.yaml"


class AnalysisSettings(BaseModel):
    blast_radius_depth: int = Field(DEFAULT_BLAST_RADIUS_DEPTH, ge=1, le=MAX_TRAVERSAL_DEPTH)
    max_selection: int = Field(DEFAULT_MAX_SELECTION, ge=1)
    max_paths: int = Field(DEFAULT_MAX_PATHS, ge=1)
    min_confidence: float = Field(0.0, ge=0.0, le=1.0)


class LayoutSettings(BaseModel):
    node_width: int = Field(DEFAULT_NODE_WIDTH, gt=0)
    node_height: int = Field(DEFAULT_NODE_HEIGHT, gt=0)
    spacing: int = Field(DEFAULT_NODE_SPACING, ge=0)


class TelemetrySettings(BaseModel):
    enabled: bool = True
    max_history: int = Field(MAX_ACTION_HISTORY, ge=1)


class ViewerConfig(BaseModel):
    """Project level configuration."""
    version: str = "1.0"
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
    layout: LayoutSettings = Field(default_factory=LayoutSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)


DEFAULT_CONFIG: Dict[str, Any] = ViewerConfig().model_dump()


def default_config_path(root_dir: Optional[Path] = None) -> Path:
    return (root_dir or Path(".")) / CONFIG_DIR / CONFIG_FILE


def load_config(config_path: Optional[Path] = None) -> ViewerConfig:
    """
    Load project configuration.

    A missing file yields the defaults. A file that cannot be parsed or that
    holds invalid values raises ``ConfigError``.
    """
    from .core.exceptions import ConfigError

    path = config_path or default_config_path()
    if not path.exists():
        return ViewerConfig()

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(str(path), f"invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(str(path), "top level must be a mapping")

    try:
        return ViewerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(str(path), str(e)) from e


def write_default_config(root_dir: Path) -> Path:
    """Write a default config file, returning its path."""
    path = default_config_path(root_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(DEFAULT_CONFIG, f, sort_keys=False)
    return path
