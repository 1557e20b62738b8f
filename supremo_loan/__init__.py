"""Client library for the Supremo loan-origination service."""
import logging
import os
from typing import Final

API_PREFIX: Final[str] = "/api/v1/oauth"
# Deployments have exposed anchors under both "client-anchors" and
# "anchors/client-anchors".
ANCHORS_PATH: Final[str] = os.getenv("SUPREMO_ANCHORS_PATH", "client-anchors").strip("/")

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .client import LoanApiClient  # noqa: E402
from .config import ConfigProvider, EnvConfigProvider, SecretsManager, get_config_provider  # noqa: E402
from .logging import enable_logging  # noqa: E402
from .errors import (  # noqa: E402
    DecodeError,
    LoanClientError,
    RemoteError,
    TransportError,
    ValidationError,
)
from .models import (  # noqa: E402
    Anchor,
    AnchorPage,
    AuthCodeToken,
    AuthenticatedUser,
    BearerToken,
    CalculatedLoanCost,
    ClientCredential,
    ClientLimit,
    LoanApplicationResult,
    LoanInput,
    PaginationSpec,
)
from .registry import ClientRegistry, build_many, build_one, dump_clients, inject_keys  # noqa: E402

__all__ = [
    "API_PREFIX",
    "ANCHORS_PATH",
    "LoanApiClient",
    "ClientRegistry",
    "build_one",
    "build_many",
    "inject_keys",
    "dump_clients",
    "ConfigProvider",
    "EnvConfigProvider",
    "SecretsManager",
    "get_config_provider",
    "enable_logging",
    "LoanClientError",
    "ValidationError",
    "TransportError",
    "DecodeError",
    "RemoteError",
    "Anchor",
    "AnchorPage",
    "AuthCodeToken",
    "AuthenticatedUser",
    "BearerToken",
    "CalculatedLoanCost",
    "ClientCredential",
    "ClientLimit",
    "LoanApplicationResult",
    "LoanInput",
    "PaginationSpec",
]
