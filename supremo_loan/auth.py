"""OAuth helpers for the loan service.

Two grants go through the same token endpoint with basic auth
``(public_key, secret_key)``:

* client credentials: machine-to-machine token for the client itself
* authorization code: token for the user who approved the redirect

Tokens are returned to the caller as-is; nothing is cached or refreshed here.
"""
from __future__ import annotations

import logging
from typing import Dict, Type, TypeVar, Union

import httpx

from . import API_PREFIX
from .http import LoanHTTP
from .metrics import oauth_tokens_issued_total
from .models import BearerToken, ClientCredential

__all__ = [
    "TOKEN_PATH",
    "USER_PATH",
    "basic_auth",
    "bearer_headers",
    "client_credentials_grant",
    "authorization_code_grant",
    "exchange_token",
]

_LOG = logging.getLogger(__name__)

TOKEN_PATH = f"{API_PREFIX}/auth/token/"
USER_PATH = f"{API_PREFIX}/auth/user"

TokenT = TypeVar("TokenT", bound=BearerToken)


def basic_auth(credential: ClientCredential) -> httpx.BasicAuth:
    return httpx.BasicAuth(
        credential.public_key, credential.secret_key.get_secret_value()
    )


def bearer_headers(token: Union[str, BearerToken]) -> Dict[str, str]:
    if isinstance(token, BearerToken):
        token = token.access_token
    return {"Authorization": f"Bearer {token}"}


def client_credentials_grant(credential: ClientCredential) -> Dict[str, str]:
    return {
        "grant_type": "client_credentials",
        "redirect_uri": credential.redirect_url,
        "client_id": credential.public_key,
    }


def authorization_code_grant(credential: ClientCredential, code: str) -> Dict[str, str]:
    return {
        "code": code,
        "grant_type": "authorization_code",
        "redirect_uri": credential.redirect_url,
    }


async def exchange_token(
    http: LoanHTTP,
    credential: ClientCredential,
    form: Dict[str, str],
    expect: Type[TokenT],
) -> TokenT:
    """POST *form* to the token endpoint and decode the grant response."""

    token = await http.post(
        TOKEN_PATH,
        expect,
        endpoint="token",
        data=form,
        auth=basic_auth(credential),
    )
    grant = form["grant_type"]
    oauth_tokens_issued_total.labels(grant).inc()
    _LOG.debug(
        "Issued %s token; scope=%s", grant, token.scope,
        extra={"client": credential.name, "endpoint": "token"},
    )
    return token
