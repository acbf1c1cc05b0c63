import logging
import sys

import pytest

from bravo.providers.favro.bravo_client import reset_bravo_client

# Configure logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)
logger.info("Test logging configured: level=DEBUG")


@pytest.fixture(autouse=True)
def log_test_start(request):
    """Log test start and end for each test."""
    logger.info("=" * 80)
    logger.info("Starting test: %s", request.node.name)
    yield
    logger.info("Completed test: %s", request.node.name)
    logger.info("=" * 80)


@pytest.fixture(autouse=True)
def isolated_singleton():
    """每个测试使用独立的 BravoClient 单例"""
    reset_bravo_client()
    yield
    reset_bravo_client()


@pytest.fixture
def bravo_client():
    """使用测试凭证、真实 httpx 传输层的客户端（配合 respx_mock 使用）"""
    from bravo.providers.favro.bravo_client import BravoClient
    from tests.unit.favro_fixtures import BASE_URL, ORGANIZATION_ID, TOKEN, USER_EMAIL

    return BravoClient(TOKEN, USER_EMAIL, ORGANIZATION_ID, base_url=BASE_URL)
