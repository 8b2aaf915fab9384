#!/usr/bin/env python3
"""
Configuration loader for StreamWatch
Loads configuration from config.yaml file.
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, field


def _as_number(value: Any, default: float, name: str) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    return value


@dataclass
class ScanConfig:
    """Source page scanning configuration"""
    injection_delay_ms: int = 100
    detector_script: str = 'content.js'
    fetch_timeout: float = 10

    @property
    def injection_delay(self) -> float:
        """Delay in seconds between detector injection and the retried message"""
        return self.injection_delay_ms / 1000

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScanConfig':
        """Create ScanConfig from dictionary"""
        delay = int(_as_number(data.get('injection_delay_ms'), 100, 'scan.injection_delay_ms'))
        if delay < 0:
            raise ValueError("scan.injection_delay_ms must not be negative")

        timeout = _as_number(data.get('fetch_timeout'), 10, 'scan.fetch_timeout')
        if timeout <= 0:
            raise ValueError("scan.fetch_timeout must be positive")

        return cls(
            injection_delay_ms=delay,
            detector_script=data.get('detector_script') or 'content.js',
            fetch_timeout=timeout
        )


@dataclass
class MatchingConfig:
    """Series matching configuration"""
    similarity_threshold: float = 0.8

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MatchingConfig':
        """Create MatchingConfig from dictionary"""
        threshold = float(_as_number(data.get('similarity_threshold'), 0.8, 'matching.similarity_threshold'))
        if not 0 <= threshold <= 1:
            raise ValueError("matching.similarity_threshold must be between 0 and 1")
        return cls(similarity_threshold=threshold)


@dataclass
class ServerConfig:
    """Web service configuration"""
    host: str = '127.0.0.1'
    port: int = 8000
    player_url: str = 'chrome-extension://streamwatch/index.html'

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ServerConfig':
        """Create ServerConfig from dictionary"""
        # Environment overrides the file for the player page location
        player_url = os.getenv('STREAMWATCH_PLAYER_URL', '') or data.get('player_url') or cls.player_url
        return cls(
            host=data.get('host') or cls.host,
            port=int(_as_number(data.get('port'), 8000, 'server.port')),
            player_url=player_url
        )


@dataclass
class LoggingConfig:
    """Logging configuration"""
    log_file: Optional[str] = None
    verbose: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LoggingConfig':
        """Create LoggingConfig from dictionary"""
        log_file = os.getenv('STREAMWATCH_LOG_FILE', '') or data.get('log_file')
        if log_file == '' or log_file == 'null':
            log_file = None
        return cls(log_file=log_file, verbose=bool(data.get('verbose', False)))


@dataclass
class Config:
    """Complete application configuration"""
    scan: ScanConfig = field(default_factory=ScanConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create Config from dictionary"""
        for section in ('scan', 'matching', 'server', 'logging'):
            value = data.get(section)
            if value is not None and not isinstance(value, dict):
                raise ValueError(f"'{section}' section in config.yaml must be a mapping")

        return cls(
            scan=ScanConfig.from_dict(data.get('scan') or {}),
            matching=MatchingConfig.from_dict(data.get('matching') or {}),
            server=ServerConfig.from_dict(data.get('server') or {}),
            logging=LoggingConfig.from_dict(data.get('logging') or {})
        )


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load complete configuration from YAML file

    Args:
        config_path: Path to config.yaml file. If None, looks for config.yaml
                     in the current directory or script directory, and falls
                     back to defaults when there is none.

    Returns:
        Config object with all loaded configurations

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
        ValueError: If the configuration is empty or has invalid values
    """
    if config_path is None:
        # Try current directory first
        config_file = Path.cwd() / 'config.yaml'

        # If not found, try script directory
        if not config_file.exists():
            config_file = Path(__file__).parent / 'config.yaml'

        if not config_file.exists():
            return Config.from_dict({})
    else:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {config_file}\n"
                f"Please create it from config.example.yaml."
            )

    # Load and parse YAML file
    with open(config_file, 'r', encoding='utf-8') as f:
        config_data = yaml.safe_load(f)

    if not config_data:
        raise ValueError("Configuration file is empty")
    if not isinstance(config_data, dict):
        raise ValueError("Configuration file must contain a mapping")

    return Config.from_dict(config_data)
