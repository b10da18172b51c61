"""Configuration package for archive analyzer."""

from .models import (
    AppConfig,
    ProjectConfig,
    AnalysisConfig,
    LoggingConfig,
    ArchiveAnalyzerError,
    ConfigError,
    InvalidInputError,
    UnsupportedArchiveError,
    DecodeFailure,
    DEFAULT_CONFIG_PATH,
    safe_load_dataclass,
)

__all__ = [
    'AppConfig',
    'ProjectConfig',
    'AnalysisConfig',
    'LoggingConfig',
    'ArchiveAnalyzerError',
    'ConfigError',
    'InvalidInputError',
    'UnsupportedArchiveError',
    'DecodeFailure',
    'DEFAULT_CONFIG_PATH',
    'safe_load_dataclass',
]
