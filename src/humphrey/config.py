"""
Configuration module for humphrey.

Uses Pydantic models for validation of run options. Options come from an
optional JSON file and are overridden by command line arguments.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64; rv:109.0) Gecko/20100101 Firefox/115.0"


class Config(BaseModel):
    """Options for one run."""
    rules: List[str] = Field(default_factory=list)
    key: str = "key"
    page: Optional[str] = None
    tmpl: Optional[str] = None
    pretty: bool = False
    strict: bool = True
    arrays: bool = False
    raw: bool = False
    escape_html: bool = Field(False, alias="escapeHtml")
    browser: bool = False
    user_agent: str = Field(DEFAULT_USER_AGENT, alias="userAgent")
    timeout: Optional[float] = None
    parser: str = "lxml"

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @field_validator("key")
    @classmethod
    def key_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("key must not be empty")
        return value

    @field_validator("timeout")
    @classmethod
    def timeout_positive(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("timeout must be positive")
        return value


def load_config(config_path: Union[str, Path]) -> Config:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration object
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    config = Config.model_validate(data)
    logger.info(f"Loaded {len(config.rules)} rules")
    return config


def merge_config(config: Config, overrides: Dict[str, Any], rules: Optional[List[str]] = None) -> Config:
    """
    Apply command line overrides to a configuration.

    Args:
        config: Base configuration
        overrides: Field values; None means "not given" and is ignored
        rules: Extra rules appended after the configured ones

    Returns:
        New validated configuration
    """
    data = config.model_dump()
    data.update({name: value for name, value in overrides.items() if value is not None})
    data["rules"] = list(config.rules) + list(rules or [])
    return Config.model_validate(data)
