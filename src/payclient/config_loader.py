"""
ConfigLoader module for loading and validating TOML client configuration files
"""

import os
import base64
import logging
import tomllib
from pathlib import Path
from dataclasses import dataclass, field, replace
from typing import Dict, Any


logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete"""
    pass


class EnvironmentVariableError(Exception):
    """Raised when required environment variables are missing"""
    pass


ENVIRONMENTS = {
    'live': 'https://api.gocardless.com',
    'sandbox': 'https://api-sandbox.gocardless.com'
}

DEFAULT_API_VERSION = '2015-07-06'

# Upper bound on attempts per request, including the first one
MAX_RETRIES = 3
DEFAULT_WAIT_SECONDS = 0.5


@dataclass(frozen=True)
class ClientConfig:
    """Immutable client configuration passed to the HTTP client at construction"""
    base_url: str
    authentication: Dict[str, Any]
    api_version: str = DEFAULT_API_VERSION
    timeout_seconds: float = 30.0
    max_attempts: int = MAX_RETRIES
    wait_seconds: float = DEFAULT_WAIT_SECONDS
    backoff_factor: float = 1.0
    error_on_idempotency_conflict: bool = False
    logging: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_access_token(cls, access_token: str, environment: str = 'live',
                          **overrides: Any) -> "ClientConfig":
        """
        Build a configuration in code for a bearer access token

        Args:
            access_token: API access token
            environment: 'live' or 'sandbox'
            **overrides: Any other ClientConfig field

        Returns:
            ClientConfig instance

        Raises:
            ConfigurationError: If the environment is unknown or max_attempts is invalid
        """
        if 'base_url' not in overrides and environment not in ENVIRONMENTS:
            raise ConfigurationError(f"Unknown environment: {environment}")

        values = {
            'base_url': ENVIRONMENTS.get(environment),
            'authentication': {'type': 'bearer_token', 'token': access_token}
        }
        values.update(overrides)
        config = cls(**values)
        return replace(config, max_attempts=ConfigLoader.clamp_max_attempts(config.max_attempts))


class ConfigLoader:
    """Loads and validates TOML configuration files"""

    # Required configuration sections and their mandatory keys
    REQUIRED_SECTIONS = {
        'api': [],
        'authentication': ['type']
    }

    # Credentials each authentication type needs, given literally or as '<name>_env'
    AUTHENTICATION_KEYS = {
        'bearer_token': ['token'],
        'basic': ['username', 'password']
    }

    @staticmethod
    def load_toml_config(config_path: Path) -> ClientConfig:
        """
        Load client configuration from TOML file

        Args:
            config_path: Path to the TOML configuration file

        Returns:
            ClientConfig object with all configuration data

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If required configuration is missing or the
                TOML syntax is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'rb') as f:
                config_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {config_path}: {e}") from e

        # Validate required sections and keys
        ConfigLoader._validate_required_sections(config_data)

        api = config_data['api']
        retries = config_data.get('retries', {})
        idempotency = config_data.get('idempotency', {})

        return ClientConfig(
            base_url=ConfigLoader._resolve_base_url(api),
            authentication=config_data['authentication'],
            api_version=api.get('api_version', DEFAULT_API_VERSION),
            timeout_seconds=float(api.get('timeout_seconds', 30.0)),
            max_attempts=ConfigLoader.clamp_max_attempts(retries.get('max_attempts', MAX_RETRIES)),
            wait_seconds=float(retries.get('wait_seconds', DEFAULT_WAIT_SECONDS)),
            backoff_factor=float(retries.get('backoff_factor', 1.0)),
            error_on_idempotency_conflict=bool(idempotency.get('error_on_conflict', False)),
            logging=config_data.get('logging', {})
        )

    @staticmethod
    def _validate_required_sections(config_data: Dict[str, Any]) -> None:
        """
        Validate that all required configuration sections and keys are present

        Args:
            config_data: Parsed TOML configuration data

        Raises:
            ConfigurationError: If any required section or key is missing
        """
        missing_items = []

        for section_name, required_keys in ConfigLoader.REQUIRED_SECTIONS.items():
            if section_name not in config_data:
                missing_items.append(f"Section [{section_name}]")
            else:
                section_data = config_data[section_name]
                for key in required_keys:
                    if key not in section_data:
                        missing_items.append(f"Key '{key}' in section [{section_name}]")

        api = config_data.get('api')
        if api is not None and 'base_url' not in api and 'environment' not in api:
            missing_items.append("Key 'base_url' or 'environment' in section [api]")

        auth = config_data.get('authentication', {})
        for name in ConfigLoader.AUTHENTICATION_KEYS.get(auth.get('type'), []):
            if name not in auth and f"{name}_env" not in auth:
                missing_items.append(f"Key '{name}_env' in section [authentication]")

        if missing_items:
            raise ConfigurationError(
                f"Missing required configuration items: {', '.join(missing_items)}"
            )

        if 'type' in auth and auth['type'] not in ConfigLoader.AUTHENTICATION_KEYS:
            raise ConfigurationError(f"Unsupported authentication type: {auth['type']}")

    @staticmethod
    def _resolve_base_url(api: Dict[str, Any]) -> str:
        if 'base_url' in api:
            return api['base_url']

        environment = api['environment']
        if environment not in ENVIRONMENTS:
            raise ConfigurationError(f"Unknown environment: {environment}")
        return ENVIRONMENTS[environment]

    @staticmethod
    def clamp_max_attempts(max_attempts: int) -> int:
        """
        Restrict the configured number of attempts to the supported range

        Raises:
            ConfigurationError: If fewer than one attempt is configured
        """
        max_attempts = int(max_attempts)
        if max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be at least 1, got {max_attempts}")
        if max_attempts > MAX_RETRIES:
            logger.warning(f"max_attempts={max_attempts} exceeds the limit, using {MAX_RETRIES}")
            return MAX_RETRIES
        return max_attempts

    @staticmethod
    def validate_environment_variables(config: ClientConfig) -> bool:
        """
        Validate that all required environment variables are set

        Args:
            config: ClientConfig object to validate

        Returns:
            True if all environment variables are present

        Raises:
            EnvironmentVariableError: If any required environment variables are missing
        """
        missing_vars = []

        # Check authentication environment variables
        auth_config = config.authentication
        for key, value in auth_config.items():
            if key.endswith('_env') and isinstance(value, str):
                # This is an environment variable reference
                env_var_name = value
                if not os.getenv(env_var_name):
                    missing_vars.append(env_var_name)

        if missing_vars:
            raise EnvironmentVariableError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )

        return True

    @staticmethod
    def get_environment_value(env_var_name: str) -> str:
        """
        Get environment variable value with proper error handling

        Args:
            env_var_name: Name of the environment variable

        Returns:
            Value of the environment variable

        Raises:
            EnvironmentVariableError: If environment variable is not set
        """
        value = os.getenv(env_var_name)
        if value is None:
            raise EnvironmentVariableError(f"Environment variable '{env_var_name}' is not set")
        return value

    @staticmethod
    def resolve_credentials(config: ClientConfig) -> str:
        """
        Build the Authorization header value for the configured credentials

        Literal values ('token', 'username', 'password') take precedence over the
        corresponding '*_env' references.

        Args:
            config: ClientConfig object

        Returns:
            Header value, 'Bearer <token>' or 'Basic <base64 credentials>'

        Raises:
            ConfigurationError: If the authentication type is not supported
            EnvironmentVariableError: If a referenced variable is not set
        """
        auth = config.authentication
        auth_type = auth.get('type')

        def lookup(name: str) -> str:
            if name in auth:
                return auth[name]
            return ConfigLoader.get_environment_value(auth[f"{name}_env"])

        if auth_type == 'bearer_token':
            return f"Bearer {lookup('token')}"

        elif auth_type == 'basic':
            raw = f"{lookup('username')}:{lookup('password')}".encode('utf-8')
            return f"Basic {base64.b64encode(raw).decode('ascii')}"

        else:
            raise ConfigurationError(f"Unsupported authentication type: {auth_type}")
