"""Unit tests for configuration management."""

import os

import pytest
from pydantic import ValidationError

from synthcrawl.config import Settings
from synthcrawl.core.induction import SynthesisConfig


def test_settings_from_environment(test_settings: Settings):
    """Test that settings load from prefixed environment variables."""
    assert test_settings.similarity_threshold == 0.6
    assert test_settings.max_iterations == 4
    assert test_settings.log_level == "DEBUG"


def test_default_values():
    """Test that default values are set correctly."""
    settings = Settings(_env_file=None)

    assert settings.similarity_threshold == 0.5
    assert settings.max_iterations == 10
    assert settings.max_workers == 1
    assert settings.parser_features == "html.parser"
    assert settings.environment == "development"


def test_similarity_threshold_validation_invalid(test_settings: Settings):
    """Test validation error for a threshold outside (0, 1]."""
    os.environ["SYNTHCRAWL_SIMILARITY_THRESHOLD"] = "1.5"

    with pytest.raises(ValidationError) as exc_info:
        Settings(_env_file=None)

    assert "Invalid similarity_threshold" in str(exc_info.value)


def test_max_iterations_must_be_positive(test_settings: Settings):
    """Test that a zero iteration bound is rejected."""
    os.environ["SYNTHCRAWL_MAX_ITERATIONS"] = "0"

    with pytest.raises(ValidationError) as exc_info:
        Settings(_env_file=None)

    assert "at least 1" in str(exc_info.value)


def test_parser_features_validation_invalid(test_settings: Settings):
    """Test validation error for an unknown tree builder."""
    os.environ["SYNTHCRAWL_PARSER_FEATURES"] = "regex"

    with pytest.raises(ValidationError) as exc_info:
        Settings(_env_file=None)

    assert "Invalid parser_features" in str(exc_info.value)


def test_synthesis_config_from_settings(test_settings: Settings):
    """Test that orchestrator config mirrors settings."""
    config = SynthesisConfig.from_settings(test_settings)

    assert config.similarity_threshold == 0.6
    assert config.max_iterations == 4
    assert config.max_workers == 1


def test_synthesis_config_rejects_zero_iterations():
    """Test that the iteration bound is mandatory."""
    with pytest.raises(ValueError, match="max_iterations"):
        SynthesisConfig(max_iterations=0)


def test_settings_singleton():
    """Test settings singleton access."""
    from synthcrawl.config import settings

    assert settings is not None
    assert hasattr(settings, "similarity_threshold")
    assert hasattr(settings, "max_iterations")
