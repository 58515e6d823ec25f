"""
YAML settings parser for wildfind.

This module loads, parses and validates wildfind settings files. It handles
settings file discovery, parsing, validation and warnings, and can write a
commented template to get started.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import logging
from dataclasses import dataclass

from pydantic import ValidationError

from ..models.config import FinderConfig


logger = logging.getLogger(__name__)

MAX_REASONABLE_WORKERS = 64


@dataclass
class ConfigParseResult:
    """
    Result of a settings parsing operation.

    Attributes:
        config: The parsed and validated settings
        warnings: List of non-fatal warnings
        config_path: Path to the settings file used
        is_default: Whether default settings were used
    """
    config: FinderConfig
    warnings: List[str]
    config_path: Optional[Path]
    is_default: bool


class ConfigurationError(Exception):
    """Raised when settings parsing or validation fails."""
    pass


class ConfigParser:
    """
    YAML settings parser with validation and error handling.

    Loads wildfind settings files, validates their contents and converts
    them to FinderConfig objects. Supports settings file discovery, default
    settings and warnings about suspicious combinations.
    """

    DEFAULT_CONFIG_NAMES = [
        '.wildfind.yaml',
        '.wildfind.yml',
        'wildfind.yaml',
        'wildfind.yml',
    ]

    def __init__(self, strict_mode: bool = False):
        """
        Initialize the settings parser.

        Args:
            strict_mode: If True, treat warnings as errors
        """
        self.strict_mode = strict_mode
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
        """
        Load and parse settings from file or use defaults.

        Args:
            config_path: Path to settings file. If None, searches the default locations.

        Returns:
            ConfigParseResult containing parsed settings and metadata

        Raises:
            ConfigurationError: If settings are invalid or the file cannot be read
        """
        try:
            if config_path:
                config_path = Path(config_path)
                if not config_path.exists():
                    raise ConfigurationError(f"Configuration file not found: {config_path}")

                config_data = self._load_yaml_file(config_path)
                is_default = False
            else:
                config_path, config_data = self._find_and_load_config()
                is_default = config_data is None

                if is_default:
                    config_data = {}

            finder_config = self._validate_config_data(config_data)

            warnings = self._get_parser_warnings(finder_config, is_default)

            if self.strict_mode and warnings:
                raise ConfigurationError(f"Configuration warnings in strict mode: {'; '.join(warnings)}")

            self.logger.info(f"Configuration loaded successfully from {config_path or 'defaults'}")

            return ConfigParseResult(
                config=finder_config,
                warnings=warnings,
                config_path=config_path,
                is_default=is_default
            )

        except Exception as e:
            if isinstance(e, ConfigurationError):
                raise
            else:
                raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def _find_and_load_config(self) -> tuple[Optional[Path], Optional[Dict[str, Any]]]:
        """
        Find and load a settings file from the default locations.

        Returns:
            Tuple of (config_path, config_data) or (None, None) if not found
        """
        search_paths = [
            Path.cwd(),
            Path.home(),
            Path.home() / '.config' / 'wildfind',
        ]

        for search_path in search_paths:
            for config_name in self.DEFAULT_CONFIG_NAMES:
                config_file = search_path / config_name
                if config_file.exists() and config_file.is_file():
                    try:
                        config_data = self._load_yaml_file(config_file)
                        self.logger.info(f"Found configuration file: {config_file}")
                        return config_file, config_data
                    except ConfigurationError as e:
                        self.logger.warning(f"Failed to load {config_file}: {e}")
                        continue

        self.logger.info("No configuration file found, using defaults")
        return None, None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load and parse a YAML file.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed YAML data as dictionary

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()

            if not content.strip():
                self.logger.warning(f"Configuration file is empty: {file_path}")
                return {}

            data = yaml.safe_load(content)

            # Comments only
            if data is None:
                return {}

            if not isinstance(data, dict):
                raise ConfigurationError(f"Configuration file must contain a YAML object, got {type(data).__name__}")

            return data

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except (OSError, IOError) as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

    def _validate_config_data(self, config_data: Dict[str, Any]) -> FinderConfig:
        """
        Validate settings data and build a FinderConfig.

        Args:
            config_data: Raw settings data from YAML

        Returns:
            Validated FinderConfig

        Raises:
            ConfigurationError: If settings are invalid
        """
        try:
            return FinderConfig.from_dict(config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

    def _get_parser_warnings(self, config: FinderConfig, is_default: bool) -> List[str]:
        """
        Get parser-specific warnings.

        Args:
            config: The parsed settings
            is_default: Whether default settings were used

        Returns:
            List of warning messages
        """
        warnings = []

        if is_default:
            warnings.append("No configuration file found, using default settings")

        overlapping = config.get_overlapping_names()
        if overlapping:
            warnings.append(f"Directories are both ignored and allowed, ignore wins: {overlapping}")

        if config.ignore.root_only and config.ignore.is_empty():
            warnings.append("Ignore rule is root-only but names no directories")

        if config.allow.root_only and config.allow.is_empty():
            warnings.append("Allow rule is root-only but names no directories")

        if config.concurrency.max_workers > MAX_REASONABLE_WORKERS:
            warnings.append(f"Very high max_workers ({config.concurrency.max_workers}) may exhaust system threads")

        return warnings

    def save_config(self, config: FinderConfig, output_path: Union[str, Path]) -> None:
        """
        Save settings to a YAML file.

        Args:
            config: Settings to save
            output_path: Path where to save the settings

        Raises:
            ConfigurationError: If file cannot be written
        """
        try:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)

            yaml_content = self._generate_yaml_with_comments(config.to_dict())

            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(yaml_content)

            self.logger.info(f"Configuration saved to {output_path}")

        except (OSError, IOError) as e:
            raise ConfigurationError(f"Cannot write configuration file {output_path}: {e}") from e

    def _generate_yaml_with_comments(self, config_dict: Dict[str, Any]) -> str:
        """
        Generate YAML content with helpful comments.

        Args:
            config_dict: Settings dictionary

        Returns:
            YAML content with comments
        """
        lines = [
            "# wildfind configuration",
            "# Command-line flags override these settings; ignore/allow names from flags are added to these.",
            "",
        ]

        sections = [
            ("ignore", "Directories not to descend into (root_only: apply in the search directory only)"),
            ("allow", "Only descend into these directories; an empty list allows all"),
            ("concurrency", "Parallel walk settings (min_entries_for_split must be at least 2)"),
        ]

        for section_name, comment in sections:
            if section_name in config_dict:
                lines.append(f"# {comment}")
                section_yaml = yaml.dump({section_name: config_dict[section_name]},
                                         default_flow_style=False,
                                         sort_keys=False)
                lines.append(section_yaml.rstrip())
                lines.append("")

        return "\n".join(lines)

    def validate_config_file(self, config_path: Union[str, Path]) -> List[str]:
        """
        Validate a settings file without keeping the result.

        Args:
            config_path: Path to settings file

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        try:
            config_path = Path(config_path)

            if not config_path.exists():
                errors.append(f"Configuration file not found: {config_path}")
                return errors

            config_data = self._load_yaml_file(config_path)
            self._validate_config_data(config_data)

        except ConfigurationError as e:
            errors.append(str(e))

        return errors

    def get_config_template(self) -> str:
        """
        Get a template settings file with all options and comments.

        Returns:
            YAML template as string
        """
        template_config = FinderConfig(
            ignore={'names': ['.git', 'node_modules', '__pycache__', 'target'], 'root_only': False},
        )
        return self._generate_yaml_with_comments(template_config.to_dict())


def load_config(config_path: Optional[Union[str, Path]] = None, strict_mode: bool = False) -> ConfigParseResult:
    """
    Convenience function to load settings.

    Args:
        config_path: Path to settings file (optional)
        strict_mode: Whether to treat warnings as errors

    Returns:
        ConfigParseResult containing parsed settings

    Raises:
        ConfigurationError: If settings are invalid
    """
    parser = ConfigParser(strict_mode=strict_mode)
    return parser.load_config(config_path)


def validate_config_file(config_path: Union[str, Path]) -> List[str]:
    """
    Convenience function to validate a settings file.

    Args:
        config_path: Path to settings file

    Returns:
        List of validation errors (empty if valid)
    """
    parser = ConfigParser()
    return parser.validate_config_file(config_path)


def create_config_template(output_path: Union[str, Path]) -> None:
    """
    Create a template settings file.

    Args:
        output_path: Where to save the template

    Raises:
        ConfigurationError: If template cannot be created
    """
    parser = ConfigParser()
    template_content = parser.get_config_template()

    try:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(template_content)

    except (OSError, IOError) as e:
        raise ConfigurationError(f"Cannot create template file {output_path}: {e}") from e
