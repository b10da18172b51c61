"""Configuration models for the archive analyzer."""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")


# --- CUSTOM EXCEPTIONS ---

class ArchiveAnalyzerError(Exception):
    """Base exception for archive analyzer errors."""


class ConfigError(ArchiveAnalyzerError):
    """Configuration loading error."""


class InvalidInputError(ArchiveAnalyzerError):
    """The supplied input is not a readable archive."""


class UnsupportedArchiveError(InvalidInputError):
    """The supplied file is not of a supported archive type."""


class DecodeFailure(ArchiveAnalyzerError):
    """An entry's content could not be decoded as text."""

    def __init__(self, entry_name: str, reason: str = ""):
        self.entry_name = entry_name
        message = f"Cannot decode '{entry_name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


# --- CONFIGURATION DATACLASSES ---

@dataclass
class ProjectConfig:
    """Configuration for the archive to inspect."""
    archive_path: Optional[Path] = None


@dataclass
class AnalysisConfig:
    """Configuration for the analysis run."""
    max_concurrency: int = 8


@dataclass
class LoggingConfig:
    """Configuration for logging behavior."""
    level: str = "INFO"
    log_file: Optional[Path] = None


# --- HELPER FUNCTIONS ---

def safe_load_dataclass(dclass_type, data: Optional[dict], section_name: str):
    """Safely load a dataclass from a dictionary.
    
    Ignores unknown keys and logs warnings for them.
    
    Args:
        dclass_type: Dataclass type to instantiate
        data: Dictionary with configuration data (None means "use defaults")
        section_name: Name of config section (for logging)
        
    Returns:
        Instance of dclass_type with filtered data
    """
    valid_keys = {f.name for f in fields(dclass_type)}
    filtered_data = {}

    for k, v in (data or {}).items():
        if k in valid_keys:
            filtered_data[k] = v
        else:
            logger.warning(
                "Config warning: Unknown key '%s' in section '%s' ignored.",
                k, section_name
            )

    return dclass_type(**filtered_data)


@dataclass
class AppConfig:
    """Main application configuration container."""
    project: ProjectConfig
    analysis: AnalysisConfig
    logging: LoggingConfig

    @classmethod
    def defaults(cls) -> 'AppConfig':
        """Build a configuration with every section at its default."""
        return cls(
            project=ProjectConfig(),
            analysis=AnalysisConfig(),
            logging=LoggingConfig(),
        )

    @classmethod
    def load(cls, config_path: Path | str, required: bool = True) -> 'AppConfig':
        """Load application configuration from a YAML file.
        
        Args:
            config_path: Path to config.yaml file
            required: If False, a missing file yields the default configuration
            
        Returns:
            AppConfig instance with loaded configuration
            
        Raises:
            ConfigError: If file not found (and required), YAML parsing fails
                or a value is invalid
        """
        path = Path(config_path)
        if not path.exists():
            if not required:
                logger.debug("No configuration at '%s', using defaults", path)
                return cls.defaults()
            raise ConfigError(f"Configuration file '{path}' not found.")

        try:
            with path.open('r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing YAML: {e}") from e

        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file '{path}' must contain a mapping.")

        try:
            project = safe_load_dataclass(ProjectConfig, data.get('project'), 'project')
            analysis = safe_load_dataclass(AnalysisConfig, data.get('analysis'), 'analysis')
            log_cfg = safe_load_dataclass(LoggingConfig, data.get('logging'), 'logging')
        except (TypeError, AttributeError) as e:
            raise ConfigError(f"Invalid configuration structure: {e}") from e

        if project.archive_path is not None:
            project.archive_path = Path(project.archive_path)
        if log_cfg.log_file is not None:
            log_cfg.log_file = Path(log_cfg.log_file)

        if not isinstance(analysis.max_concurrency, int) or analysis.max_concurrency < 1:
            raise ConfigError(
                f"analysis.max_concurrency must be a positive integer, "
                f"got {analysis.max_concurrency!r}"
            )

        return cls(project=project, analysis=analysis, logging=log_cfg)
