import pytest

from supremo_loan.config import SecretsManager
from supremo_loan.models import ClientCredential

from .helpers import RecordingTransport


def pytest_configure(config):
    """If pytest-socket is installed, disable sockets; everything runs on mock transports."""
    try:
        import pytest_socket

        pytest_socket.disable_socket()
    except ImportError:
        pass


@pytest.fixture
def anyio_backend():
    return "asyncio"


# ---------------------------------------------------------------------------
# Credentials / configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def client_record() -> dict:
    return {
        "base_url": "https://loans.test",
        "secret_key": "s3cr3t-value",
        "public_key": "pub-123",
        "name": "acme bank",
        "logo_url": "https://acme.test/logo.png",
        "redirect_url": "https://acme.test/callback",
    }


@pytest.fixture
def credential(client_record) -> ClientCredential:
    return ClientCredential(**client_record)


@pytest.fixture
def secrets() -> SecretsManager:
    """File-less secrets manager; tests fill it via ``set_override``."""

    manager = SecretsManager(path="/nonexistent/supremo-secrets.json")
    manager.set_override({})
    return manager


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()
