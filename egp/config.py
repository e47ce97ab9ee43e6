"""
Engine Configuration System

Pydantic v2-based configuration with YAML/JSON support and environment overrides.

Features:
- Type-safe configuration model
- YAML/JSON file loading
- Environment variable overrides
- Logging and randomness setup from one place

Author: EGP Team
License: MIT
"""

from __future__ import annotations

import json
import os
import random
from pathlib import Path
from typing import IO, Any, Callable, Literal

import yaml
from loguru import logger
from pydantic import BaseModel, Field, field_validator

from .logging_config import configure_logging
from .operators import OperatorConfig
from .rng import make_rng


class EngineConfig(BaseModel):
    """Configuration for genome development and evolution."""

    # Randomness
    seed: int | None = Field(
        default=None,
        description="Seed for the injected random source (None = nondeterministic)",
    )

    # Chromosomes
    chromosome_size: int = Field(
        default=64,
        ge=3,
        le=1_000_000,
        description="Ab-initio chromosome size (output + terminals + regulars)",
    )

    # Operators
    transfer_range: float = Field(
        default=0.1,
        gt=0.0,
        le=1.0,
        description="Upper bound of recombination counts as a fraction of chromosome_size",
    )

    activity_mutation_rate: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Probability that a mutation relabels activity instead of a binding",
    )

    remove_rate: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Probability that recombination removes instead of transferring",
    )

    # Logging
    log_level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum log level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional rotating log file",
    )

    log_serialize: bool = Field(
        default=False,
        description="Emit JSON log records",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    # -------------------------------------------------------------------------
    # Derived objects
    # -------------------------------------------------------------------------

    def make_rng(self) -> random.Random:
        return make_rng(self.seed)

    def operator_config(self) -> OperatorConfig:
        return OperatorConfig(
            activity_rate=self.activity_mutation_rate,
            remove_rate=self.remove_rate,
        )

    def setup_logging(self) -> list[int]:
        return configure_logging(
            log_level=self.log_level,
            log_file=self.log_file,
            serialize=self.log_serialize,
        )

    # -------------------------------------------------------------------------
    # Loading & saving
    # -------------------------------------------------------------------------

    @classmethod
    def from_yaml(cls, path: str | Path) -> EngineConfig:
        """Load configuration from a YAML file (an empty file gives defaults)."""
        return cls(**_read(path, lambda f: yaml.safe_load(f) or {}))

    @classmethod
    def from_json(cls, path: str | Path) -> EngineConfig:
        """Load configuration from a JSON file."""
        return cls(**_read(path, json.load))

    @classmethod
    def from_env(cls, prefix: str = "EGP_") -> EngineConfig:
        """
        Load configuration from environment variables.

        Variables are named after the fields, upper-cased and prefixed,
        with ``__`` separating nested keys:

            EGP_SEED=42
            EGP_TRANSFER_RANGE=0.2

        Values stay strings; pydantic coerces them to the field types.

        Args:
            prefix: Environment variable prefix

        Returns:
            EngineConfig instance
        """
        config_dict: dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(prefix):
                continue

            *parents, name = key[len(prefix):].lower().split("__")
            current = config_dict
            for part in parents:
                current = current.setdefault(part, {})
            current[name] = value

        logger.info("Loaded configuration from environment", prefix=prefix, keys=sorted(config_dict))
        return cls(**config_dict)

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file, creating parent directories."""
        _write(
            path,
            lambda data, f: yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False),
            self.model_dump(mode="json"),
        )

    def to_json(self, path: str | Path) -> None:
        """Save configuration to a JSON file, creating parent directories."""
        _write(path, lambda data, f: json.dump(data, f, indent=2), self.model_dump(mode="json"))


def _read(path: str | Path, load: Callable[[IO[str]], dict[str, Any]]) -> dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = load(f)

    logger.info(f"Loaded configuration from {path}")
    return data


def _write(path: str | Path, dump: Callable[[dict[str, Any], IO[str]], Any], data: dict[str, Any]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        dump(data, f)

    logger.info(f"Saved configuration to {path}")


# =============================================================================
# Configuration Factory
# =============================================================================


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "EGP_",
) -> EngineConfig:
    """
    Load configuration with automatic format detection.

    Priority:
    1. Explicit config file (YAML or JSON)
    2. Environment variables
    3. Defaults

    Args:
        config_path: Path to config file (YAML or JSON)
        env_prefix: Environment variable prefix

    Returns:
        EngineConfig instance
    """
    if config_path:
        path = Path(config_path)
        if path.suffix in (".yaml", ".yml"):
            return EngineConfig.from_yaml(path)
        elif path.suffix == ".json":
            return EngineConfig.from_json(path)
        else:
            raise ValueError(f"Unknown config format: {path.suffix}")

    if any(key.startswith(env_prefix) for key in os.environ):
        logger.info("Using configuration from environment variables")
        return EngineConfig.from_env(env_prefix)

    logger.info("Using default configuration")
    return EngineConfig()


__all__ = ["EngineConfig", "load_config"]
