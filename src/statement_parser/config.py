"""
Configuration management (SSOT).

This module defines ALL configuration for the statement parser.
All config keys are defined here; no other module should invent config keys.

Key invariants:
- Every key has a default, so a missing config file yields a working parser
- Environment variables override file values
- Bank profiles from ``bank_profiles_path`` are loaded once, at start-up
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class ExtractionConfig:
    """Line scanning and bank profile settings."""

    # Lines of this length or shorter are never transaction candidates
    min_line_length: int = 10
    # Default for requests that do not set strict_mode themselves (runner)
    strict_mode: bool = False
    # Optional YAML file with additional bank profiles
    bank_profiles_path: Path | None = None


@dataclass
class ScoringConfig:
    """Quality and overall-confidence settings."""

    high_threshold: float = 80.0
    medium_threshold: float = 60.0
    low_threshold: float = 40.0
    # Mean transaction confidence below this triggers a warning
    low_transaction_confidence: float = 60.0
    # Quality bonus when a known bank layout was recognized
    bank_quality_boost: float = 10.0
    # Relative tolerance for opening + transactions vs closing balance
    balance_tolerance: float = 0.01


@dataclass
class ValidationConfig:
    """Post-hoc validation settings."""

    # Minimum score for a result to count as valid
    valid_score_threshold: float = 60.0
    low_confidence_threshold: float = 60.0
    balance_tolerance: float = 0.01


@dataclass
class Config:
    """Application configuration (SSOT).

    All configuration is centralized here. No other module should define
    configuration keys or defaults.
    """

    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    # Worker threads for batch parsing
    max_workers: int = 4

    def validate(self) -> list[str]:
        """Validate configuration completeness and consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        scoring = self.scoring
        if not (
            100 >= scoring.high_threshold >= scoring.medium_threshold >= scoring.low_threshold >= 0
        ):
            errors.append("scoring thresholds must satisfy 100 >= high >= medium >= low >= 0")

        if self.extraction.min_line_length < 0:
            errors.append("extraction.min_line_length must be >= 0")

        for name, tolerance in (
            ("scoring.balance_tolerance", scoring.balance_tolerance),
            ("validation.balance_tolerance", self.validation.balance_tolerance),
        ):
            if not 0 <= tolerance < 1:
                errors.append(f"{name} must be in [0, 1)")

        if not 0 <= self.validation.valid_score_threshold <= 100:
            errors.append("validation.valid_score_threshold must be in [0, 100]")

        if self.max_workers < 1:
            errors.append("max_workers must be >= 1")

        profiles = self.extraction.bank_profiles_path
        if profiles is not None and not profiles.exists():
            errors.append(f"extraction.bank_profiles_path does not exist: {profiles}")

        return errors


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name, "").lower()
    if value == "true":
        return True
    if value == "false":
        return False
    return default


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from YAML file.

    Environment variables can override config values:
    - STATEMENT_PARSER_STRICT_MODE (true/false)
    - STATEMENT_PARSER_BANK_PROFILES (path to bank profile YAML)
    - STATEMENT_PARSER_MAX_WORKERS (batch worker threads)

    Raises:
        ConfigValidationError: If the resulting configuration is invalid
    """
    if config_path is not None and config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    # Extraction config
    extraction_data = data.get("extraction", {})
    profiles_path = os.environ.get(
        "STATEMENT_PARSER_BANK_PROFILES", extraction_data.get("bank_profiles_path")
    )
    extraction = ExtractionConfig(
        min_line_length=extraction_data.get("min_line_length", 10),
        strict_mode=_env_bool(
            "STATEMENT_PARSER_STRICT_MODE", extraction_data.get("strict_mode", False)
        ),
        bank_profiles_path=Path(profiles_path) if profiles_path else None,
    )

    # Scoring config
    scoring_data = data.get("scoring", {})
    scoring = ScoringConfig(
        high_threshold=scoring_data.get("high_threshold", 80.0),
        medium_threshold=scoring_data.get("medium_threshold", 60.0),
        low_threshold=scoring_data.get("low_threshold", 40.0),
        low_transaction_confidence=scoring_data.get("low_transaction_confidence", 60.0),
        bank_quality_boost=scoring_data.get("bank_quality_boost", 10.0),
        balance_tolerance=scoring_data.get("balance_tolerance", 0.01),
    )

    # Validation config
    validation_data = data.get("validation", {})
    validation = ValidationConfig(
        valid_score_threshold=validation_data.get("valid_score_threshold", 60.0),
        low_confidence_threshold=validation_data.get("low_confidence_threshold", 60.0),
        balance_tolerance=validation_data.get("balance_tolerance", 0.01),
    )

    max_workers = data.get("max_workers", 4)
    max_workers_env = os.environ.get("STATEMENT_PARSER_MAX_WORKERS", "")
    if max_workers_env:
        try:
            max_workers = int(max_workers_env)
        except ValueError as e:
            raise ConfigValidationError(
                f"STATEMENT_PARSER_MAX_WORKERS must be an integer, got {max_workers_env!r}"
            ) from e

    config = Config(
        extraction=extraction,
        scoring=scoring,
        validation=validation,
        max_workers=max_workers,
    )

    errors = config.validate()
    if errors:
        raise ConfigValidationError("; ".join(errors))

    return config


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    default_config = """# Statement parser configuration
#
# Every key is optional; omitted keys use the defaults shown here.

extraction:
  min_line_length: 10          # Lines this short are never transactions
  strict_mode: false           # Require a date on every transaction line
  bank_profiles_path: null     # YAML file with extra bank profiles

scoring:
  high_threshold: 80           # Overall score >= this: high
  medium_threshold: 60         # >= this: medium
  low_threshold: 40            # >= this: low, below: very_low
  low_transaction_confidence: 60
  bank_quality_boost: 10       # Added when a known bank layout is recognized
  balance_tolerance: 0.01      # 1% of the closing balance

validation:
  valid_score_threshold: 60
  low_confidence_threshold: 60
  balance_tolerance: 0.01

# Worker threads for batch parsing
max_workers: 4
"""

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        f.write(default_config)
