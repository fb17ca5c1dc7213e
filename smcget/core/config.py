# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
smc-get configuration.

All settings come from YAML files. Files are evaluated in the order given,
values from later files override earlier ones. There is no global instance:
the loaded Config is handed to PackageManager explicitly.
"""

import logging
import os
import tempfile
import yaml
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Dict, Any, Union

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIRECTORY = "/usr/share/smc"
DEFAULT_REPO_URL = "https://github.com/Luiji/Secret-Maryo-Chronicles-Contributed-Levels/raw/master/"


@dataclass(frozen=True)
class Config:
    """
    Immutable smc-get configuration.
    """

    # -- Paths --
    data_directory: str = DEFAULT_DATA_DIRECTORY
    temp_dir: Optional[str] = None

    # -- Remote repository --
    repo_url: str = DEFAULT_REPO_URL
    max_tries: int = 3
    retry_delay: float = 1.0
    http_timeout: float = 30.0

    # -- Logging --
    log_level: str = "INFO"
    log_format: str = "text"

    @property
    def data_path(self) -> Path:
        return Path(self.data_directory).expanduser()

    @property
    def temp_path(self) -> Path:
        """Scratch area for fetched specs and decompressed archives."""
        if self.temp_dir:
            return Path(self.temp_dir).expanduser()
        return Path(tempfile.gettempdir()) / "smc-get"


def _normalize_keys(document: Dict[str, Any]) -> Dict[str, Any]:
    """Accept both `data-directory` and `data_directory` spellings."""
    return {str(key).replace("-", "_"): value for key, value in document.items()}


def load_config(
    *paths: Union[str, Path],
    overrides: Optional[Dict[str, Any]] = None
) -> Config:
    """
    Load configuration from YAML files.

    Args:
        *paths: Configuration files, lowest precedence first
        overrides: Explicit values (e.g. from the command line) that win over
                   every file

    Returns:
        Merged configuration; defaults where nothing was set

    Raises:
        ConfigurationError: If a file is not a YAML mapping or sets an
                            invalid value
    """
    known = {f.name for f in fields(Config)}
    values: Dict[str, Any] = {}

    for path in paths:
        path = Path(path).expanduser()
        if not path.exists():
            logger.debug(f"Config not found at {path}, skipping")
            continue

        try:
            with open(path) as f:
                document = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}", config_file=str(path))

        if not isinstance(document, dict):
            raise ConfigurationError(
                f"Expected a mapping in {path}, got {type(document).__name__}",
                config_file=str(path)
            )

        for key, value in _normalize_keys(document).items():
            if key in known:
                values[key] = value
            else:
                logger.warning(f"Ignoring unknown configuration key '{key}' in {path}")

        logger.debug(f"Loaded configuration from {path}")

    for key, value in _normalize_keys(overrides or {}).items():
        if key not in known:
            logger.warning(f"Ignoring unknown configuration override '{key}'")
        elif value is not None:
            values[key] = value

    if os.getenv("SMC_GET_LOG_LEVEL"):
        values["log_level"] = os.getenv("SMC_GET_LOG_LEVEL")

    try:
        if "max_tries" in values:
            values["max_tries"] = int(values["max_tries"])
        for key in ("retry_delay", "http_timeout"):
            if key in values:
                values[key] = float(values[key])
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration value: {e}")

    if values.get("max_tries", 1) < 1:
        raise ConfigurationError("max_tries must be at least 1")

    return Config(**values)
