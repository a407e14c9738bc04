"""Configuration loading and management"""

import os
import re
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..core.models import ScanConfiguration
from ..core.profiles import get_profile
from ..utils.logger import setup_logger

ENV_PREFIX = "DEFENDER_PLAN_AUDITOR_"

_DELIMITERS = re.compile(r"[,;\s]+")


def parse_subscription_ids(values: Optional[Any]) -> List[str]:
    """Split comma, semicolon or whitespace separated ids.

    Order and repeated ids are kept. Non-string values, such as numbers
    read from YAML, are converted with ``str``.
    """
    if values is None:
        return []
    if isinstance(values, str) or not isinstance(values, (list, tuple)):
        values = [values]

    result = []
    for value in values:
        text = "" if value is None else str(value)
        result.extend(item for item in _DELIMITERS.split(text) if item)
    return result


class ConfigurationLoader:
    """Load and manage configuration from various sources"""

    def __init__(self):
        self.logger = setup_logger(self.__class__.__name__)

    def load_configuration(
        self,
        config_file: Optional[str] = None,
        **overrides
    ) -> ScanConfiguration:
        """Load configuration from file and environment variables"""

        config_dict = asdict(ScanConfiguration())

        if config_file:
            file_config = self._load_from_file(config_file)
        else:
            file_config = self._load_default_config()
        if file_config:
            config_dict.update(file_config)

        config_dict.update(self._load_from_environment())

        config_dict.update({k: v for k, v in overrides.items() if v is not None})

        known_keys = {f.name for f in fields(ScanConfiguration)}
        unknown = set(config_dict) - known_keys
        if unknown:
            self.logger.warning(f"Ignoring unknown configuration keys: {', '.join(sorted(unknown))}")
        config = ScanConfiguration(**{k: v for k, v in config_dict.items() if k in known_keys})
        config.subscription_ids = parse_subscription_ids(config.subscription_ids)
        self._validate_configuration(config)
        return config

    def _load_from_file(self, config_file: str) -> Optional[Dict[str, Any]]:
        """Load configuration from YAML file"""

        config_path = Path(config_file)
        if not config_path.exists():
            self.logger.warning(f"Configuration file not found: {config_file}")
            return None

        if config_path.suffix.lower() not in ('.yml', '.yaml'):
            self.logger.error(f"Unsupported config file format: {config_path.suffix}")
            return None

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Failed to load configuration file {config_file}: {e}")
            return None

        self.logger.info(f"Loaded configuration from: {config_file}")
        return self._flatten_config(config_data)

    def _load_default_config(self) -> Optional[Dict[str, Any]]:
        """Try to load from default configuration locations"""

        default_locations = [
            "defender_plan_auditor.yml",
            "defender_plan_auditor.yaml",
            os.path.expanduser("~/.defender_plan_auditor.yml"),
        ]

        for location in default_locations:
            if os.path.exists(location):
                return self._load_from_file(location)

        return None

    def _load_from_environment(self) -> Dict[str, Any]:
        """Load configuration from environment variables"""

        env_config = {}

        env_mapping = {
            ENV_PREFIX + 'SUBSCRIPTION_IDS': ('subscription_ids', parse_subscription_ids),
            ENV_PREFIX + 'LIMIT': ('limit', int),
            ENV_PREFIX + 'PROFILE': ('profile', str),
            ENV_PREFIX + 'EXPORT_CSV': ('export_csv', self._parse_bool),
            ENV_PREFIX + 'CSV_PATH': ('csv_path', str),
            ENV_PREFIX + 'API_VERSION': ('api_version', str),
        }

        for env_var, (config_key, parser) in env_mapping.items():
            value = os.getenv(env_var)
            if value is not None:
                try:
                    env_config[config_key] = parser(value)
                    self.logger.debug(f"Loaded {config_key} from environment: {value}")
                except ValueError as e:
                    self.logger.warning(f"Failed to parse environment variable {env_var}={value}: {e}")

        return env_config

    def _flatten_config(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Lift settings out of their YAML sections.

        ``scan_settings: {limit: 10}`` becomes ``limit: 10``; keys are not
        prefixed with their section name.
        """

        flattened = {}

        def _flatten(obj):
            for key, value in obj.items():
                if isinstance(value, dict):
                    _flatten(value)
                else:
                    flattened[key] = value

        if isinstance(config_data, dict):
            _flatten(config_data)
        return flattened

    def _parse_bool(self, value: str) -> bool:
        """Parse string into boolean"""
        return value.strip().lower() in ('true', '1', 'yes', 'on', 'enabled')

    def _validate_configuration(self, config: ScanConfiguration) -> None:
        """Validate configuration values"""

        get_profile(config.profile)

        if config.limit is not None:
            config.limit = int(config.limit)
            if config.limit <= 0:
                self.logger.debug("Non-positive limit given, scanning without a limit")
                config.limit = None

        if not str(config.csv_path or "").strip():
            raise ValueError("CSV path must not be empty")

        self.logger.debug("Configuration validation completed")

    def save_configuration(self, config: ScanConfiguration, output_file: str) -> None:
        """Save configuration to a YAML file"""

        nested_config = {
            'scan_settings': {
                'subscription_ids': list(config.subscription_ids),
                'limit': config.limit,
                'profile': config.profile,
            },
            'export_settings': {
                'export_csv': config.export_csv,
                'csv_path': config.csv_path,
            },
            'api_settings': {
                'api_version': config.api_version,
            },
        }

        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write("# Defender Plan Auditor Configuration\n")
            yaml.safe_dump(nested_config, f, default_flow_style=False, indent=2)

        self.logger.info(f"Configuration saved to: {output_file}")
