"""
Configuration loading for rendering.

Configuration comes from three layers, later ones winning: a JSON file with
"render" and "fractal" sections, IMAGE_TRANSFORM_* environment variables,
and command-line options.
"""

import json
import logging
import os
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from ..api import RenderConfig
from ..core.fractal_types import FractalParameters

logger = logging.getLogger(__name__)


class EnvironmentConfig:
    """Render configuration overrides read from the environment."""

    PREFIX = 'IMAGE_TRANSFORM_'

    VARIABLES = {
        'PROCESSES': ('num_processes', int),
        'TILE_SIZE': ('tile_size', int),
        'BACKEND': ('backend', str),
    }

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def overrides(self) -> Dict[str, Any]:
        """Collect overrides from the environment."""
        result = {}
        for suffix, (key, convert) in self.VARIABLES.items():
            name = self.PREFIX + suffix
            raw = self.environ.get(name)
            if raw is None or raw == '':
                continue
            try:
                result[key] = convert(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {name}: {raw!r}")
            logger.debug(f"Environment override {name}={raw}")
        return result

    def apply(self, config: RenderConfig) -> RenderConfig:
        for key, value in self.overrides().items():
            setattr(config, key, value)
        return config


class ConfigManager:
    """Load and build configuration objects from JSON files."""

    def load_config(self, filepath: Union[str, Path]) -> Dict[str, Any]:
        """Load a JSON configuration file."""
        filepath = Path(filepath)
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid configuration file {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {filepath} must contain a JSON object")

        logger.info(f"Loaded configuration: {filepath}")
        return data

    def create_render_config(self, data: Dict[str, Any]) -> RenderConfig:
        """Build a RenderConfig from the "render" section."""
        section = data.get('render', {})
        known = {f.name for f in fields(RenderConfig)}
        unknown = set(section) - known
        if unknown:
            logger.warning(f"Ignoring unknown render options: {', '.join(sorted(unknown))}")
        return RenderConfig(**{k: v for k, v in section.items() if k in known})

    def create_fractal_parameters(self, data: Dict[str, Any]) -> FractalParameters:
        """Build FractalParameters from the "fractal" section."""
        return FractalParameters.from_dict(data.get('fractal', {}))


def load_config_from_args(config_file: Optional[Union[str, Path]] = None,
                          environ: Optional[Dict[str, str]] = None
                          ) -> Tuple[RenderConfig, FractalParameters]:
    """
    Build render configuration and fractal parameters.

    Args:
        config_file: Optional JSON configuration file
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Tuple of (render_config, fractal_parameters)
    """
    manager = ConfigManager()
    data = manager.load_config(config_file) if config_file else {}

    render_config = manager.create_render_config(data)
    fractal_parameters = manager.create_fractal_parameters(data)

    EnvironmentConfig(environ).apply(render_config)

    return render_config, fractal_parameters
