"""
Configuration Loader for Uploader Service

This module loads the deployment defaults used while normalizing publications
from ``config/uploader.yml``. Every key is optional; missing keys fall back to
the values shipped with the importer.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = 'UPLOADER_CONFIG'


@dataclass
class RegionDefaults:
    """Location used when a publication does not say where it is."""

    city: str = 'Cusco'
    district: str = 'Cusco'


@dataclass
class ContactDefaults:
    """Placeholder contact for publications imported without one."""

    name: str = 'Anunciante'
    phone: str = '999999999'
    whatsapp: str = '999999999'
    email: str = 'contacto@buscadis.com'


@dataclass
class ShortIdSettings:
    """Shape of the human-facing short id and its collision budget."""

    digits: int = 4
    max_attempts: int = 50

    def validate(self) -> None:
        if self.digits < 1:
            raise ValueError(f"short_id.digits must be positive, got {self.digits}")
        if self.max_attempts < 1:
            raise ValueError(
                f"short_id.max_attempts must be positive, got {self.max_attempts}"
            )


@dataclass
class UploaderConfig:
    """Complete uploader configuration."""

    region: RegionDefaults = field(default_factory=RegionDefaults)
    contact: ContactDefaults = field(default_factory=ContactDefaults)
    currency: str = 'PEN'
    status: str = 'active'
    user_id: str = 'admin'
    subcategory: str = 'general'
    short_id: ShortIdSettings = field(default_factory=ShortIdSettings)
    table_prefix: Optional[str] = None

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> "UploaderConfig":
        """Create UploaderConfig from dictionary."""
        defaults = _section(config_dict, 'defaults')
        region_dict = _section(defaults, 'region')
        contact_dict = _section(defaults, 'contact')
        short_id_dict = _section(config_dict, 'short_id')
        sink_dict = _section(config_dict, 'sink')

        region = RegionDefaults(
            city=str(region_dict.get('city', 'Cusco')),
            district=str(region_dict.get('district', 'Cusco')),
        )
        contact = ContactDefaults(
            name=str(contact_dict.get('name', 'Anunciante')),
            phone=str(contact_dict.get('phone', '999999999')),
            whatsapp=str(contact_dict.get('whatsapp', '999999999')),
            email=str(contact_dict.get('email', 'contacto@buscadis.com')),
        )
        short_id = ShortIdSettings(
            digits=int(short_id_dict.get('digits', 4)),
            max_attempts=int(short_id_dict.get('max_attempts', 50)),
        )
        short_id.validate()

        return cls(
            region=region,
            contact=contact,
            currency=str(defaults.get('currency', 'PEN')),
            status=str(defaults.get('status', 'active')),
            user_id=str(defaults.get('user_id', 'admin')),
            subcategory=str(defaults.get('subcategory', 'general')),
            short_id=short_id,
            table_prefix=sink_dict.get('table_prefix'),
        )


def _section(parent: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = parent.get(name) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"`{name}` section must be a mapping")
    return value


def _default_config_path() -> Path:
    """Return ``config/uploader.yml`` relative to the project root."""
    return Path(__file__).resolve().parent.parent.parent / 'config' / 'uploader.yml'


def load_uploader_config(config_path: Optional[str] = None) -> UploaderConfig:
    """
    Load uploader configuration from YAML file.

    Args:
        config_path: Path to the YAML file. When omitted, ``UPLOADER_CONFIG``
            is consulted and then the repository's ``config/uploader.yml``.

    Returns:
        UploaderConfig with any missing keys filled from built-in defaults

    Raises:
        FileNotFoundError: If an explicitly requested file does not exist
        ValueError: If the YAML is invalid or has the wrong structure
    """
    explicit = config_path or os.getenv(CONFIG_PATH_ENV)
    path = Path(explicit) if explicit else _default_config_path()

    if not path.exists():
        if explicit:
            logger.error(f"Configuration file not found: {path}")
            raise FileNotFoundError(f"Configuration file not found: {path}")
        logger.warning(
            "No uploader configuration found, using built-in defaults",
            extra={'config_path': str(path)}
        )
        return UploaderConfig()

    try:
        with path.open('r', encoding='utf-8') as handle:
            config_dict = yaml.safe_load(handle)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise ValueError(f"Invalid YAML in config file: {e}") from e

    if not config_dict:
        logger.warning("Empty configuration file, using defaults")
        return UploaderConfig()

    if not isinstance(config_dict, Mapping):
        raise ValueError("Uploader configuration must be a mapping at the top level")

    try:
        config = UploaderConfig.from_dict(config_dict)
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to load configuration: {e}")
        raise ValueError(f"Failed to load configuration: {e}") from e

    logger.info(
        "Uploader configuration loaded",
        extra={
            'config_path': str(path),
            'default_city': config.region.city,
            'currency': config.currency,
        }
    )
    return config
