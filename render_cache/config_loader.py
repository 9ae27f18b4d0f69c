import os
import sys
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from dotenv import load_dotenv
from loguru import logger

from .config import CacheSettings


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(level: str):
    """Setup logging configuration"""
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level.upper())


class ConfigLoader:
    """Load and validate cache settings from YAML files

    Expected layout:

        cache:
          backend: redis
          fail_open: false
          log_level: INFO
          redis:
            url: REDIS_URL
    """

    def __init__(self, config_path: Union[str, Path]):
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        # Load environment variables from .env file
        env_path = Path(".env")
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug("Loaded environment variables from .env file")
        else:
            logger.debug("No .env file found, using system environment variables")

    def load(self) -> CacheSettings:
        """Load cache settings from YAML file"""
        with open(self.config_path, 'r', encoding='utf-8') as f:
            raw_config = yaml.safe_load(f) or {}

        if 'cache' not in raw_config:
            raise ValueError("Missing required configuration key: cache")

        cache_config = raw_config['cache'] or {}
        if not isinstance(cache_config, dict):
            raise ValueError("Configuration key 'cache' must be a mapping")

        for section in ('redis', 'mysql'):
            if isinstance(cache_config.get(section), dict):
                cache_config[section] = self._resolve_env_vars(cache_config[section])

        return CacheSettings.from_dict(cache_config)

    def _resolve_env_vars(self, section: Dict[str, Any]) -> Dict[str, Any]:
        """Resolve environment variable references in config values"""
        resolved = {}
        for key, value in section.items():
            if isinstance(value, str) and value.upper() in os.environ:
                logger.debug(f"Resolved environment variable {value} for {key}")
                resolved[key] = os.environ[value.upper()]
            else:
                resolved[key] = value
        return resolved
