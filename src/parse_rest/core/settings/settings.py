"""ParseSettings - configuration manager for parse-rest clients.

Settings come from a JSON file, a dict and environment variables, merged
into a single "parse" section.

Configuration layout:
- parse: Connection settings
  - server_url: Server base URL (the "/parse" root is optional)
  - application_id: Application identifier (required)
  - master_key / javascript_key / rest_api_key: Optional credentials
  - timeout: Request timeout in seconds (default 30)

Environment variables follow the naming convention:
PARSE_REST__PARSE__<KEY> for nested values
Example: PARSE_REST__PARSE__SERVER_URL="http://localhost:1337/parse"
         PARSE_REST__PARSE__TIMEOUT=10

The flat names PARSE_SERVER_URL, PARSE_APP_ID, PARSE_MASTER_KEY,
PARSE_JAVASCRIPT_KEY and PARSE_REST_API_KEY are read as well; the nested
form wins when both are set.
"""

import json
import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Any

from parse_rest.core.auth.context import AuthContext
from parse_rest.core.dispatcher.dispatcher import DEFAULT_TIMEOUT, normalize_server_url
from parse_rest.core.errors.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SECTION = "parse"

#: Flat environment names → settings keys.
FLAT_ENV_KEYS = {
    "PARSE_SERVER_URL": "server_url",
    "PARSE_APP_ID": "application_id",
    "PARSE_MASTER_KEY": "master_key",
    "PARSE_JAVASCRIPT_KEY": "javascript_key",
    "PARSE_REST_API_KEY": "rest_api_key",
}

_SECRET_KEYS = frozenset({"master_key", "javascript_key", "rest_api_key"})


class ParseSettings:
    """Configuration manager for one client.

    Each ParseClient built from settings keeps its own ParseSettings
    instance, so configuration state is never shared between clients.
    """

    ENV_PREFIX = "PARSE_REST"
    ENV_SEPARATOR = "__"

    def __init__(self, config_path: str | None = None):
        """Initialize the settings manager.

        Args:
            config_path: Path to JSON configuration file. If None, only the
                        provided dict and environment variables are used.
        """
        self._config_path = config_path
        self._config = self.default_config()
        self._loaded = False
        logger.debug("ParseSettings instance created with config_path=%s", config_path)

    @staticmethod
    def default_config() -> dict[str, Any]:
        """Return a new default config dict each time."""
        return {SECTION: {"timeout": DEFAULT_TIMEOUT}}

    def load(self, config: dict[str, Any] | None = None) -> None:
        """Load configuration from a dict, the JSON file and the environment.

        Args:
            config: Optional config dict, shaped like the JSON file.

        Priority (highest to lowest):
        1. Environment variables
        2. JSON file
        3. Provided config (if any)
        4. Default values
        """
        if self._loaded:
            logger.debug("Configuration already loaded, skipping reload")
            return

        self._config = self.default_config()

        if config is not None:
            self._merge_section(config, source="config dict")

        if self._config_path:
            self._load_from_json()

        self._load_from_env()

        self._loaded = True
        logger.info("Configuration loaded successfully")
        logger.debug("Final config keys: %s", sorted(self._config[SECTION]))

    def _merge_section(self, data: Any, *, source: str) -> None:
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration from {source} must be an object")
        if SECTION not in data:
            return
        section = data[SECTION]
        if not isinstance(section, dict):
            raise ConfigurationError(f"'{SECTION}' section from {source} must be an object", key=SECTION)
        self._config[SECTION].update(deepcopy(section))

    def _load_from_json(self) -> None:
        """Load configuration from the JSON file."""
        config_file = Path(self._config_path)
        if not config_file.exists():
            logger.warning("Config file not found: %s", self._config_path)
            return

        try:
            with open(config_file, encoding="utf-8") as f:
                json_config = json.load(f)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in config file %s: %s", self._config_path, e)
            raise ConfigurationError(f"Invalid JSON configuration file: {e}") from e

        self._merge_section(json_config, source=str(config_file))
        logger.info("Loaded configuration from JSON: %s", self._config_path)

    def _load_from_env(self) -> None:
        """Load configuration from environment variables.

        Flat names are applied first so that PARSE_REST__PARSE__<KEY>
        overrides them.
        """
        for env_key, key in FLAT_ENV_KEYS.items():
            if env_key in os.environ:
                self._config[SECTION][key] = os.environ[env_key]
                logger.debug("Set from env: %s", env_key)

        prefix = f"{self.ENV_PREFIX}{self.ENV_SEPARATOR}"
        for env_key, env_value in os.environ.items():
            if not env_key.startswith(prefix):
                continue

            key_path = env_key[len(prefix) :].split(self.ENV_SEPARATOR)
            if len(key_path) < 2:
                logger.warning("Invalid env var format (too short): %s", env_key)
                continue

            section = key_path[0].lower()
            if section != SECTION:
                logger.warning("Invalid section in env var %s: %s", env_key, section)
                continue

            self._set_nested_value(key_path[1:], self._parse_env_value(env_value))
            logger.debug("Set from env: %s", env_key)

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value with type inference.

        Attempts to parse as JSON first, falls back to string.
        """
        try:
            return json.loads(value)
        except ValueError:
            return value

    def _set_nested_value(self, path: list[str], value: Any) -> None:
        target = self._config[SECTION]
        for key in path[:-1]:
            target = target.setdefault(key.lower(), {})
        target[path[-1].lower()] = value

    # =========================================================================
    # ACCESS
    # =========================================================================

    def get(self, key: str | None = None, default: Any = None) -> Any:
        """Get a connection setting.

        Args:
            key: Specific configuration key. If None, returns the whole section.
            default: Default value if key not found.
        """
        if not self._loaded:
            self.load()

        if key is None:
            return deepcopy(self._config[SECTION])
        return self._config[SECTION].get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a connection setting (runtime only, not persisted)."""
        if not self._loaded:
            self.load()

        self._config[SECTION][key] = value
        shown = "****" if key in _SECRET_KEYS else value
        logger.debug("Set parse config: %s = %s", key, shown)

    def require(self, key: str) -> Any:
        """Get a setting that must be present and non-empty.

        Raises:
            ConfigurationError: If the setting is missing or empty.
        """
        value = self.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ConfigurationError(f"Missing required setting '{key}'", key=key)
        return value

    @property
    def server_url(self) -> str:
        """Normalised server URL."""
        return normalize_server_url(str(self.require("server_url")))

    @property
    def timeout(self) -> float:
        """Request timeout in seconds."""
        value = self.get("timeout", DEFAULT_TIMEOUT)
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ConfigurationError(f"Invalid timeout: {value!r}", key="timeout")
        try:
            timeout = float(value)
        except ValueError as e:
            raise ConfigurationError(f"Invalid timeout: {value!r}", key="timeout") from e
        if timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {timeout}", key="timeout")
        return timeout

    def to_auth_context(self) -> AuthContext:
        """Build the AuthContext described by these settings."""

        def optional(key: str) -> str | None:
            value = self.get(key)
            return str(value) if value not in (None, "") else None

        return AuthContext(
            application_id=str(self.require("application_id")),
            master_key=optional("master_key"),
            javascript_key=optional("javascript_key"),
            rest_api_key=optional("rest_api_key"),
        )

    def get_all_config(self) -> dict[str, Any]:
        """Get complete configuration snapshot.

        Returns:
            Deep copy of entire configuration.
        """
        if not self._loaded:
            self.load()

        return deepcopy(self._config)

    def reload(self) -> None:
        """Reload configuration from the JSON file and the environment.

        A dict passed to the first load() is not kept and is not re-applied.
        """
        self._loaded = False
        self.load()
        logger.info("Configuration reloaded")

    @property
    def config_path(self) -> str | None:
        """Get the configuration file path."""
        return self._config_path

    @property
    def is_loaded(self) -> bool:
        """Check if configuration has been loaded."""
        return self._loaded


ConfigManager = ParseSettings
