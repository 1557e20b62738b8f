import base64

import httpx
import pytest
from prometheus_client import REGISTRY

from supremo_loan.auth import TOKEN_PATH, USER_PATH, bearer_headers
from supremo_loan.client import LoanApiClient
from supremo_loan.errors import DecodeError, RemoteError
from supremo_loan.models import AuthenticatedUser, BearerToken

from .helpers import form_body

TOKEN = {
    "access_token": "tok123",
    "token_type": "Bearer",
    "expires_in": 3600,
    "scope": "read write",
}
CODE_TOKEN = {**TOKEN, "access_token": "user-tok", "refresh_token": "r1"}
USER = {"id": 5, "email": "cfo@anchor.test", "company_name": "Anchor Ltd", "anchor_id": 9}


def _expected_basic() -> str:
    return "Basic " + base64.b64encode(b"pub-123:s3cr3t-value").decode()


def _issued(grant: str) -> float:
    return REGISTRY.get_sample_value(
        "supremo_oauth_tokens_issued_total", {"grant": grant}
    ) or 0.0


@pytest.mark.anyio
async def test_get_auth_token_client_credentials(credential, transport):
    transport.routes[TOKEN_PATH] = (200, TOKEN)
    before = _issued("client_credentials")

    async with LoanApiClient(credential, transport=transport) as api:
        token = await api.get_auth_token()

    assert token == BearerToken(**TOKEN)
    assert transport.calls == 1
    request = transport.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://loans.test/api/v1/oauth/auth/token/"
    assert request.headers["Authorization"] == _expected_basic()
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert form_body(request) == {
        "grant_type": "client_credentials",
        "redirect_uri": "https://acme.test/callback",
        "client_id": "pub-123",
    }
    assert _issued("client_credentials") == before + 1


@pytest.mark.anyio
async def test_get_auth_token_non_200_is_remote_error(credential, transport):
    error_body = {"error": "invalid_client", "error_description": "bad secret"}
    transport.routes[TOKEN_PATH] = (401, error_body)

    async with LoanApiClient(credential, transport=transport) as api:
        with pytest.raises(RemoteError) as exc:
            await api.get_auth_token()

    assert exc.value.status_code == 401
    assert exc.value.body == error_body
    assert str(exc.value) == '{"error":"invalid_client","error_description":"bad secret"}'


@pytest.mark.anyio
async def test_get_auth_token_error_body_is_not_decoded_as_token(credential, transport):
    # A token-shaped body on a non-200 status is still an error.
    transport.routes[TOKEN_PATH] = (400, TOKEN)
    async with LoanApiClient(credential, transport=transport) as api:
        with pytest.raises(RemoteError) as exc:
            await api.get_auth_token()
    assert exc.value.body == TOKEN


@pytest.mark.anyio
async def test_get_auth_token_bad_shape_is_decode_error(credential, transport):
    transport.routes[TOKEN_PATH] = (200, {"access_token": "tok"})
    async with LoanApiClient(credential, transport=transport) as api:
        with pytest.raises(DecodeError) as exc:
            await api.get_auth_token()
    assert exc.value.status_code == 200


@pytest.mark.anyio
async def test_exchange_code_auth_resolves_user(credential, transport):
    transport.routes[TOKEN_PATH] = (200, CODE_TOKEN)
    transport.routes[USER_PATH] = (200, USER)
    before = _issued("authorization_code")

    async with LoanApiClient(credential, transport=transport) as api:
        user = await api.exchange_code_auth("code-abc")

    assert user == AuthenticatedUser(**USER)
    token_req, user_req = transport.requests
    assert token_req.headers["Authorization"] == _expected_basic()
    assert form_body(token_req) == {
        "code": "code-abc",
        "grant_type": "authorization_code",
        "redirect_uri": "https://acme.test/callback",
    }
    assert user_req.method == "GET"
    assert user_req.url.path == "/api/v1/oauth/auth/user"
    assert user_req.headers["Authorization"] == "Bearer user-tok"
    assert _issued("authorization_code") == before + 1


@pytest.mark.anyio
async def test_exchange_code_auth_short_circuits_on_token_failure(credential, transport):
    transport.routes[TOKEN_PATH] = (400, {"error": "invalid_grant"})
    transport.routes[USER_PATH] = (200, USER)

    async with LoanApiClient(credential, transport=transport) as api:
        with pytest.raises(RemoteError, match="invalid_grant"):
            await api.exchange_code_auth("expired")

    assert transport.calls == 1


@pytest.mark.anyio
async def test_exchange_code_auth_user_failure(credential, transport):
    transport.routes[TOKEN_PATH] = (200, CODE_TOKEN)
    transport.routes[USER_PATH] = (403, {"detail": "forbidden"})

    async with LoanApiClient(credential, transport=transport) as api:
        with pytest.raises(RemoteError) as exc:
            await api.exchange_code_auth("code-abc")

    assert exc.value.status_code == 403
    assert transport.calls == 2


@pytest.mark.anyio
async def test_auth_code_token_requires_refresh_token(credential, transport):
    transport.routes[TOKEN_PATH] = (200, TOKEN)
    async with LoanApiClient(credential, transport=transport) as api:
        with pytest.raises(DecodeError):
            await api.exchange_code_auth("code-abc")
    assert transport.calls == 1


def test_bearer_headers_accepts_token_model():
    token = BearerToken(**TOKEN)
    assert bearer_headers(token) == {"Authorization": "Bearer tok123"}
    assert bearer_headers("raw") == {"Authorization": "Bearer raw"}


@pytest.mark.anyio
async def test_secret_never_logged(credential, transport, caplog):
    transport.routes[TOKEN_PATH] = (500, {"detail": "boom"})
    caplog.set_level("DEBUG", logger="supremo_loan")

    async with LoanApiClient(credential, transport=transport) as api:
        with pytest.raises(RemoteError):
            await api.get_auth_token()

    assert caplog.records
    assert all("s3cr3t-value" not in r.getMessage() for r in caplog.records)
    assert any(getattr(r, "client", None) == "acme bank" for r in caplog.records)


@pytest.mark.anyio
async def test_external_http_is_not_closed(credential):
    from supremo_loan.http import LoanHTTP

    mock = httpx.MockTransport(lambda request: httpx.Response(200, json=TOKEN))
    http = LoanHTTP(base_url=credential.base_url, transport=mock)
    async with LoanApiClient(credential, http=http) as api:
        await api.get_auth_token()
    # still usable after the client is closed
    async with LoanApiClient(credential, http=http) as api:
        assert (await api.get_auth_token()).access_token == "tok123"
    await http.aclose()
