"""
Configuration loading module for the scholarship runner.

Loads YAML configuration with command line argument precedence.
"""

import argparse
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from scholarship.exceptions import InvalidConfig
from scholarship.models import ScholarshipConfig
from scholarship.utils import to_units


def load_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_file, "r") as f:
        config = yaml.safe_load(f) or {}

    return config


def merge_cli_args(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Override config values with command line arguments.

    CLI arguments take precedence over config file values.
    """
    simulation = config.setdefault("simulation", {})
    scholarship = config.setdefault("scholarship", {})

    if getattr(args, "rounds", None) is not None:
        simulation["rounds"] = args.rounds

    if getattr(args, "seed", None) is not None:
        simulation["seed"] = args.seed

    if getattr(args, "num_applicants", None) is not None:
        simulation["num_applicants"] = args.num_applicants

    if getattr(args, "enforce_durations", False):
        scholarship["enforce_durations"] = True

    return config


def get_config_with_args(
    config_path: Optional[str] = None, args: Optional[argparse.Namespace] = None
) -> Dict[str, Any]:
    """Load configuration and apply CLI argument overrides."""
    if config_path is None:
        config_path = "config.yaml"

    config = load_config(config_path)

    if args is not None:
        config = merge_cli_args(config, args)

    return config


def build_scholarship_config(section: Dict[str, Any]) -> ScholarshipConfig:
    """Turn the `scholarship:` section into a ScholarshipConfig.

    `seed_amount` is given in whole coins ("0.01") and converted to base units.

    Raises:
        InvalidConfig: If any value is missing or malformed
    """
    try:
        seed_amount = to_units(section.get("seed_amount", 0))
    except ValueError as exc:
        raise InvalidConfig(str(exc), {"seed_amount": section.get("seed_amount")}) from exc

    try:
        return ScholarshipConfig(
            committee=list(section.get("committee") or []),
            seed_amount=seed_amount,
            application_duration=section.get("application_duration", 7 * 24 * 3600),
            voting_duration=section.get("voting_duration", 3 * 24 * 3600),
            enforce_durations=section.get("enforce_durations", False),
        )
    except ValidationError as exc:
        raise InvalidConfig("Invalid scholarship configuration", {"errors": str(exc)}) from exc
