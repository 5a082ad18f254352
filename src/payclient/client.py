"""
PayClient module, the entry point wiring configuration, transport and services
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .config_loader import ClientConfig, ConfigLoader
from .http_client import HTTPClient
from .logging_setup import configure_logging
from .services import EventService
from .transport import Transport
from .webhook import Webhook


class PayClient:
    """
    Entry point into the client

    Example:
        with PayClient.from_config(Path('payclient.toml')) as client:
            for event in client.events.all(resource_type=EventResourceType.PAYMENTS):
                ...
    """

    webhooks = Webhook

    def __init__(self, config: ClientConfig, transport: Optional[Transport] = None):
        """
        Initialise PayClient with dependency injection

        Args:
            config: Immutable client configuration
            transport: Optional transport, a requests based one is used by default
        """
        self.config = config
        self.http_client = HTTPClient(config, transport=transport)
        self.events = EventService(self.http_client)
        self.logger = logging.getLogger(__name__)
        self.logger.debug(f"Client initialised for {config.base_url}")

    @classmethod
    def from_config(cls, config_path: Union[str, Path],
                    transport: Optional[Transport] = None) -> "PayClient":
        """
        Build a client from a TOML configuration file

        Args:
            config_path: Path to the TOML configuration file
            transport: Optional transport override

        Returns:
            Configured PayClient

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigurationError: If the configuration is invalid
            EnvironmentVariableError: If a credential environment variable is unset
        """
        config = ConfigLoader.load_toml_config(Path(config_path))
        ConfigLoader.validate_environment_variables(config)
        if config.logging:
            configure_logging(config.logging)
        return cls(config, transport=transport)

    def close(self) -> None:
        self.http_client.close()

    def __enter__(self) -> "PayClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
