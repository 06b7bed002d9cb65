import logging
import sys

import pytest

from nats_service.config import Config

# Configure logging to see debug messages
logging.basicConfig(
    level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", stream=sys.stdout
)


@pytest.fixture
def config() -> Config:
    """Minimal configuration pointing at a local server."""
    return Config(servers=["nats://127.0.0.1:4222"])
