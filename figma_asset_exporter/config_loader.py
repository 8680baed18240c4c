"""Configuration loader with YAML support and environment variable substitution."""

import copy
import os
import re
from typing import Any, Dict
from urllib.parse import urlparse

import yaml

from .figma_client import DEFAULT_API_BASE
from .fetchers.render_link_fetcher import IMPORT_BATCH_SIZE


class ConfigLoader:
    """Handles loading and validation of configuration files."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')
    TOKEN_ENV_VAR = 'FIGMA_TOKEN'

    @classmethod
    def default_config(cls) -> Dict[str, Any]:
        """Configuration used when no config file is present."""
        return {
            'figma': {
                'api_base': DEFAULT_API_BASE,
                'api_token': os.getenv(cls.TOKEN_ENV_VAR)
            },
            'export': {
                'output_directory': './figma-export',
                'batch_size': IMPORT_BATCH_SIZE,
                'max_workers': 4,
                'progress_bars': True
            },
            'advanced': {
                'request_timeout': 30,
                'max_retries': 0,
                'retry_backoff_factor': 2.0
            },
            'logging': {}
        }

    @classmethod
    def load(cls, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from YAML file with environment variable substitution.

        Values missing from the file are filled from ``default_config()``.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a dictionary")

        config_data = cls._substitute_env_vars_recursive(config_data)
        return cls._merge_defaults(cls.default_config(), config_data)

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration for required fields and correct values.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValueError: If validation fails
        """
        api_base = get_nested(config, 'figma.api_base', DEFAULT_API_BASE)
        cls._validate_url(api_base, 'figma.api_base')

        api_token = get_nested(config, 'figma.api_token')
        if api_token is not None:
            if not isinstance(api_token, str):
                raise ValueError("figma.api_token must be a string")
            if api_token:
                cls._validate_required_field(config, 'figma.api_token')

        output_dir = get_nested(config, 'export.output_directory')
        if output_dir and os.path.exists(output_dir) and not os.path.isdir(output_dir):
            raise ValueError(f"export.output_directory '{output_dir}' is not a directory")

        batch_size = get_nested(config, 'export.batch_size', IMPORT_BATCH_SIZE)
        if not isinstance(batch_size, int) or isinstance(batch_size, bool) \
                or not 1 <= batch_size <= IMPORT_BATCH_SIZE:
            raise ValueError(f"export.batch_size must be an integer between 1 and {IMPORT_BATCH_SIZE}")

        max_workers = get_nested(config, 'export.max_workers', 4)
        if not isinstance(max_workers, int) or isinstance(max_workers, bool) or max_workers < 1:
            raise ValueError("export.max_workers must be a positive integer")

        progress_bars = get_nested(config, 'export.progress_bars', True)
        if not isinstance(progress_bars, bool):
            raise ValueError("export.progress_bars must be a boolean")

        timeout = get_nested(config, 'advanced.request_timeout', 30)
        if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
            raise ValueError("advanced.request_timeout must be a positive number")

        max_retries = get_nested(config, 'advanced.max_retries', 0)
        if not isinstance(max_retries, int) or isinstance(max_retries, bool) or max_retries < 0:
            raise ValueError("advanced.max_retries must be a non-negative integer")

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration file with CLI arguments.
        CLI arguments take precedence over config file values.

        Args:
            config: Base configuration dictionary
            args: CLI arguments with attributes matching config keys

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(config)

        for section in ('figma', 'export', 'advanced', 'logging'):
            if not isinstance(merged.get(section), dict):
                merged[section] = {}

        if getattr(args, 'token', None):
            merged['figma']['api_token'] = args.token

        if getattr(args, 'out', None):
            merged['export']['output_directory'] = args.out

        if getattr(args, 'batch_size', None) is not None:
            merged['export']['batch_size'] = args.batch_size

        if getattr(args, 'workers', None) is not None:
            merged['export']['max_workers'] = args.workers

        if getattr(args, 'no_progress', False):
            merged['export']['progress_bars'] = False

        if getattr(args, 'log_file', None):
            merged['logging']['file'] = args.log_file

        verbose = getattr(args, 'verbose', 0)
        if verbose:
            merged['logging']['level'] = 'DEBUG' if verbose >= 2 else 'INFO'

        return merged

    @classmethod
    def _merge_defaults(cls, defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively overlay ``overrides`` on ``defaults``."""
        merged = copy.deepcopy(defaults)
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = cls._merge_defaults(merged[key], value)
            else:
                merged[key] = value
        return merged

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        else:
            return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            env_value = os.getenv(match.group(1))
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)

    @staticmethod
    def _validate_required_field(config_section: dict, field: str) -> None:
        """Validate that a required field exists and has a value."""
        value = get_nested(config_section, field)
        if value is None or value == '':
            raise ValueError(f"Missing required configuration: {field}")

        if isinstance(value, str) and '${' in value:
            match = ConfigLoader.ENV_VAR_PATTERN.search(value)
            var_name = match.group(1) if match else value
            raise ValueError(
                f"Configuration field '{field}' contains unsubstituted environment variable: {value}. "
                f"Please set the {var_name} environment variable or provide a value in config file."
            )

    @staticmethod
    def _validate_url(url: Any, field_name: str) -> None:
        """Validate URL format."""
        if not isinstance(url, str):
            raise ValueError(f"{field_name} must be a string")
        parsed = urlparse(url)
        if parsed.scheme not in ('http', 'https'):
            raise ValueError(f"{field_name} must use http or https scheme: {url}")
        if not parsed.netloc:
            raise ValueError(f"{field_name} missing hostname: {url}")


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "figma.api_token")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    value = config

    for key in path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


__all__ = ['ConfigLoader', 'get_nested']
