"""
Configuration loader for the Grading module.

Loads and validates configuration from config.yaml file.
"""

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from src.grading.types import (
    BinarizationConfig,
    DecisionConfig,
    GradingConfig,
    NormalizationConfig,
)

logger = logging.getLogger(__name__)

# Default configuration path (relative to this file)
DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> GradingConfig:
    """
    Load grading configuration from YAML file.

    Args:
        config_path: Path to the configuration YAML file.

    Returns:
        Validated GradingConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config is invalid or missing required fields.

    Example:
        >>> config = load_config()
        >>> print(config.normalization.grid_size)
        64
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading grading config from {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw_config = yaml.safe_load(f)

    try:
        config = _parse_config(raw_config)
        _validate_config(config)
        logger.info("Successfully loaded grading configuration")
        return config
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration file: {e}") from e


def _parse_config(raw: Dict[str, Any]) -> GradingConfig:
    """Parse raw dictionary into structured config objects."""
    return GradingConfig(
        binarization=BinarizationConfig(
            alpha_threshold=int(raw["binarization"]["alpha_threshold"]),
            luminance_threshold=float(raw["binarization"]["luminance_threshold"]),
        ),
        normalization=NormalizationConfig(
            grid_size=int(raw["normalization"]["grid_size"]),
        ),
        decision=DecisionConfig(
            pass_threshold_pct=float(raw["decision"]["pass_threshold_pct"]),
        ),
    )


def _validate_config(config: GradingConfig) -> None:
    """
    Validate configuration values for logical consistency.

    Raises:
        ValueError: If any configuration value is invalid.
    """
    if not 0 <= config.binarization.alpha_threshold <= 255:
        raise ValueError("alpha_threshold must be within 0..255")

    if not 0 <= config.binarization.luminance_threshold <= 255:
        raise ValueError("luminance_threshold must be within 0..255")

    if config.normalization.grid_size < 1:
        raise ValueError("grid_size must be at least 1")

    if config.normalization.grid_size < 16:
        logger.warning(
            f"grid_size {config.normalization.grid_size} is below 16, "
            "scores will be very coarse"
        )

    if not 0 <= config.decision.pass_threshold_pct <= 100:
        raise ValueError("pass_threshold_pct must be within 0..100")

    logger.debug("Configuration validation passed")
