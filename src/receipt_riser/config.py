"""Runtime settings loaded from YAML."""

import os
import logging
from dataclasses import dataclass, fields, replace
from datetime import timedelta
from pathlib import Path
from typing import Optional

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = 'RECEIPT_RISER_CONFIG'
DATA_DIR_ENV_VAR = 'RECEIPT_RISER_DATA_DIR'

DEFAULT_RULES_PATH = Path(__file__).parent / 'rules' / 'receipt_types.yml'


@dataclass
class Settings:
    """Tunable limits and locations for the learning pipeline."""
    data_dir: Path = Path.home() / '.receipt_riser'
    rules_path: Path = DEFAULT_RULES_PATH
    max_training_examples: int = 200
    max_correction_history: int = 100
    min_training_examples: int = 10
    training_interval_hours: float = 24.0
    check_interval_minutes: float = 60.0
    prediction_threshold: float = 0.5
    entity_chunk_size: int = 500
    max_suggestions: int = 5

    @property
    def training_interval(self) -> timedelta:
        return timedelta(hours=self.training_interval_hours)

    @property
    def check_interval(self) -> timedelta:
        return timedelta(minutes=self.check_interval_minutes)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> 'Settings':
        """
        Load settings from a YAML file.

        Args:
            path: Config file; falls back to $RECEIPT_RISER_CONFIG, then defaults

        Returns:
            Settings with file values and environment overrides applied
        """
        settings = cls()

        if path is None and os.getenv(CONFIG_ENV_VAR):
            path = Path(os.environ[CONFIG_ENV_VAR])

        if path is not None:
            settings = settings.merged(cls._read_yaml(Path(path)))

        data_dir = os.getenv(DATA_DIR_ENV_VAR)
        if data_dir:
            settings = replace(settings, data_dir=Path(data_dir))

        return settings

    @staticmethod
    def _read_yaml(path: Path) -> dict:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        logger.info(f"Loaded settings from {path}")
        return raw

    def merged(self, values: dict) -> 'Settings':
        """Return a copy with the given key/value overrides applied."""
        known = {f.name: f for f in fields(self)}
        unknown = set(values) - set(known)
        if unknown:
            raise ConfigurationError(f"Unknown settings: {', '.join(sorted(unknown))}")

        converted = {}
        for key, value in values.items():
            current = getattr(self, key)
            try:
                if isinstance(current, Path):
                    converted[key] = Path(value).expanduser()
                else:
                    converted[key] = type(current)(value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid value for {key}: {value!r}") from e

        return replace(self, **converted)
