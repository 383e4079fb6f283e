"""
coevolution.core.config - Configuration Management
====================================================

This module provides the configuration system for the simulator.
Configuration can be loaded from multiple sources with the following
priority (highest first):

    1. Explicit constructor arguments
    2. Environment variables (prefixed with COEVO_)
    3. YAML configuration file (coevolution.yaml)
    4. Default values defined in the model below

Architecture Context:
    The configuration is created once and handed to the Ecosystem, which
    passes it down to the pieces that need it:

        CoEvolutionConfig
            ├── max_cascade_depth / max_cascade_commits → Repository
            ├── gate_downstream                         → PropagationEngine
            └── log_level / log_format / verbose        → observability

Usage:
    # Load from environment variables:
    config = CoEvolutionConfig()

    # Load from YAML file:
    config = load_config("coevolution.yaml")

    # Explicit overrides:
    config = CoEvolutionConfig(max_cascade_depth=16, gate_downstream=False)

Environment Variables:
    COEVO_LOG_LEVEL=DEBUG
    COEVO_LOG_FORMAT=json
    COEVO_MAX_CASCADE_DEPTH=32
    COEVO_GATE_DOWNSTREAM=false
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from coevolution.core.exceptions import ConfigurationError


DEFAULT_CONFIG_FILE = "coevolution.yaml"


# =============================================================================
# Main Configuration
# =============================================================================
# Environment Variable Mapping:
#   COEVO_LOG_LEVEL            → config.log_level
#   COEVO_MAX_CASCADE_DEPTH    → config.max_cascade_depth
#   COEVO_GATE_DOWNSTREAM      → config.gate_downstream
# =============================================================================
class CoEvolutionConfig(BaseSettings):
    """Top-level configuration for a simulation run.

    Attributes:
        log_level: Python logging level used by the structlog filter.
        log_format: "console" for human-readable trace lines, "json" for
            one JSON object per line.
        verbose: Render artifacts with their full relationship sets in trace
            lines instead of just their version.
        max_cascade_depth: Maximum nesting of commits inside one outer
            commit. A transformation that feeds its own input recurses once
            per commit, so this bound is what stops such a loop.
        max_cascade_commits: Maximum number of commits (outer one included)
            performed by a single outer commit.
        gate_downstream: Whether a rejecting consumer also blocks firing the
            changed artifact against existing instances of its inputs.

    Example:
        >>> config = CoEvolutionConfig(log_level="DEBUG", verbose=True)
    """

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Trace renderer: 'console' or 'json'",
    )
    verbose: bool = Field(
        default=False,
        description="Render full artifact details in trace lines",
    )

    # -------------------------------------------------------------------------
    # Propagation
    # -------------------------------------------------------------------------
    max_cascade_depth: int = Field(
        default=64,
        ge=1,
        le=100,
        description="Maximum nesting depth of commits within one cascade",
    )
    max_cascade_commits: int = Field(
        default=10_000,
        ge=1,
        description="Maximum number of commits performed by one outer commit",
    )
    gate_downstream: bool = Field(
        default=True,
        description=(
            "A rejecting consumer also blocks firing the changed artifact "
            "against existing instances of its inputs"
        ),
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    model_config = {
        "env_prefix": "COEVO_",
        "case_sensitive": False,
    }


# =============================================================================
# Configuration Loader
# =============================================================================
def load_config(path: Optional[str] = None) -> CoEvolutionConfig:
    """Load configuration from a YAML file and/or environment variables.

    Args:
        path: Path to a YAML configuration file. If None, looks for
            'coevolution.yaml' in the current directory. If that doesn't
            exist either, uses pure defaults + environment variables.

    Returns:
        A fully validated CoEvolutionConfig instance.

    Raises:
        FileNotFoundError: If an explicit path is provided but doesn't exist.
        ConfigurationError: If the YAML is malformed, is not a mapping, or
            carries invalid values.
    """
    if path is None:
        default_path = Path(DEFAULT_CONFIG_FILE)
        if default_path.exists():
            path = str(default_path)

    yaml_data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {path}. "
                f"Create one or use COEVO_* environment variables."
            )

        with open(config_path) as f:
            try:
                raw_data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigurationError(
                    message=f"Malformed YAML in {path}: {exc}",
                    error_code="CONFIG_PARSE_ERROR",
                    details={"path": str(path)},
                ) from exc

        if raw_data is None:
            raw_data = {}
        if not isinstance(raw_data, dict):
            raise ConfigurationError(
                message=f"Configuration file {path} must contain a mapping",
                error_code="CONFIG_NOT_A_MAPPING",
                details={"path": str(path), "type": type(raw_data).__name__},
            )
        yaml_data = _without_env_overrides(raw_data)

    try:
        return CoEvolutionConfig(**yaml_data)
    except ValidationError as exc:
        raise ConfigurationError(
            message=f"Invalid configuration: {exc.error_count()} error(s)",
            error_code="CONFIG_INVALID",
            details={"errors": exc.errors(include_url=False)},
        ) from exc


def _without_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Drop file values whose COEVO_* variable is set.

    File values are passed as constructor arguments, which rank above the
    environment, so a key set in both places is left to the environment.
    """
    prefix = CoEvolutionConfig.model_config["env_prefix"].upper()
    env_keys = {key.upper() for key in os.environ}
    return {
        key: value
        for key, value in data.items()
        if f"{prefix}{str(key).upper()}" not in env_keys
    }


def get_default_config() -> CoEvolutionConfig:
    """Create a CoEvolutionConfig with defaults (overridden by env vars)."""
    return CoEvolutionConfig()
