"""
Test suite for PayClient and logging setup
Following TDD approach with AAA pattern and descriptive naming
"""

import logging
import pytest

from payclient.client import PayClient
from payclient.config_loader import EnvironmentVariableError
from payclient.logging_setup import LOGGER_NAME, configure_logging
from payclient.services import EventService
from payclient.webhook import Webhook


CONFIG_TEMPLATE = """
[api]
base_url = "https://api.example.com"

[authentication]
type = "bearer_token"
token_env = "PAYCLIENT_ACCESS_TOKEN"

[retries]
wait_seconds = 0
"""


@pytest.fixture
def payclient_logger():
    """Yield the package logger and remove any handlers added during the test"""
    logger = logging.getLogger(LOGGER_NAME)
    original_handlers = list(logger.handlers)
    original_level = logger.level
    yield logger
    for handler in logger.handlers:
        if handler not in original_handlers:
            handler.close()
    logger.handlers = original_handlers
    logger.setLevel(original_level)


class TestPayClient:
    """Test suite for PayClient construction and lifecycle"""

    def test_from_config_builds_client_with_services(self, tmp_path, monkeypatch, transport):
        """
        Test that a client built from TOML exposes its services and configuration
        """
        # Arrange
        monkeypatch.setenv('PAYCLIENT_ACCESS_TOKEN', 'secret')
        config_path = tmp_path / "payclient.toml"
        config_path.write_text(CONFIG_TEMPLATE)

        # Act
        client = PayClient.from_config(config_path, transport=transport)

        # Assert
        assert isinstance(client.events, EventService)
        assert client.webhooks is Webhook
        assert client.http_client.transport is transport
        assert client.http_client.credentials == 'Bearer secret'
        assert client.config.wait_seconds == 0.0

    def test_from_config_with_unset_token_variable_raises(self, tmp_path, monkeypatch, transport):
        """
        Test that a missing credential variable fails at construction time
        """
        # Arrange
        monkeypatch.delenv('PAYCLIENT_ACCESS_TOKEN', raising=False)
        config_path = tmp_path / "payclient.toml"
        config_path.write_text(CONFIG_TEMPLATE)

        # Act & Assert
        with pytest.raises(EnvironmentVariableError):
            PayClient.from_config(config_path, transport=transport)

    def test_from_config_with_logging_section_configures_logger(self, tmp_path, monkeypatch,
                                                                transport, payclient_logger):
        """
        Test that a [logging] section sets the package log level
        """
        # Arrange
        monkeypatch.setenv('PAYCLIENT_ACCESS_TOKEN', 'secret')
        config_path = tmp_path / "payclient.toml"
        config_path.write_text(CONFIG_TEMPLATE + '\n[logging]\nlevel = "warning"\n')

        # Act
        PayClient.from_config(config_path, transport=transport)

        # Assert
        assert payclient_logger.level == logging.WARNING

    def test_client_can_be_used_as_context_manager(self, config, transport):
        """
        Test that leaving the context closes the transport
        """
        # Act
        with PayClient(config, transport=transport) as client:
            assert client.config is config

        # Assert
        transport.close.assert_called_once()

    def test_events_requests_go_through_client_transport(self, config, transport, make_response):
        """
        Test that service calls are executed by the client's HTTP client
        """
        # Arrange
        transport.send.return_value = make_response(200, {'events': {'id': 'EV123'}})
        client = PayClient(config, transport=transport)

        # Act
        event = client.events.get('EV123')

        # Assert
        assert event.id == 'EV123'
        transport.send.assert_called_once()


class TestConfigureLogging:
    """Test suite for configure_logging"""

    def test_configure_logging_sets_level_and_adds_console_handler(self, payclient_logger):
        """
        Test that the package logger gets the configured level and a console handler
        """
        # Act
        logger = configure_logging({'level': 'debug'})

        # Assert
        assert logger is payclient_logger
        assert logger.level == logging.DEBUG
        assert any(isinstance(h, logging.StreamHandler) for h in logger.handlers)

    def test_configure_logging_twice_does_not_duplicate_handlers(self, payclient_logger):
        """
        Test that repeated configuration leaves a single set of handlers
        """
        # Act
        configure_logging()
        handler_count = len(payclient_logger.handlers)
        configure_logging({'level': 'ERROR'})

        # Assert
        assert len(payclient_logger.handlers) == handler_count
        assert payclient_logger.level == logging.ERROR

    def test_configure_logging_with_file_name_adds_file_handler(self, tmp_path, payclient_logger):
        """
        Test that a log file name adds a file handler at DEBUG level
        """
        # Arrange
        log_file = tmp_path / "payclient.log"

        # Act
        logger = configure_logging({'log_file_name': str(log_file)})
        logger.info("hello")

        # Assert
        file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].level == logging.DEBUG
        file_handlers[0].flush()
        assert "hello" in log_file.read_text()

    def test_configure_logging_does_not_touch_root_logger(self, payclient_logger):
        """
        Test that only the package logger is configured
        """
        # Arrange
        root_handlers = list(logging.getLogger().handlers)

        # Act
        configure_logging()

        # Assert
        assert logging.getLogger().handlers == root_handlers
