"""Async client for the loan-origination service.

One instance per registered client. The credential is read-only, so calls on
the same instance may run concurrently. Bearer tokens are passed in per call;
the caller decides when to request a new one.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Union

import httpx
from pydantic import ValidationError as PydanticValidationError

from . import ANCHORS_PATH, API_PREFIX
from .auth import (
    USER_PATH,
    authorization_code_grant,
    bearer_headers,
    client_credentials_grant,
    exchange_token,
)
from .errors import ValidationError
from .http import LoanHTTP
from .models import (
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

__all__ = ["LoanApiClient"]

Token = Union[str, BearerToken]
LoanInputLike = Union[LoanInput, Mapping[str, Any]]


def _pagination_params(
    pagination: Union[PaginationSpec, Mapping[str, Any], None]
) -> dict[str, Any]:
    if pagination is None:
        return {}
    if not isinstance(pagination, PaginationSpec):
        try:
            pagination = PaginationSpec.model_validate(pagination)
        except PydanticValidationError as exc:
            raise ValidationError(f"invalid pagination: {exc}") from exc
    return pagination.to_params()


def _loan_batch(inputs: Optional[Iterable[LoanInputLike]]) -> List[LoanInput]:
    batch: List[LoanInput] = []
    for item in inputs or ():
        if isinstance(item, LoanInput):
            batch.append(item)
            continue
        try:
            batch.append(LoanInput.model_validate(item))
        except PydanticValidationError as exc:
            raise ValidationError(f"invalid loan input: {exc}") from exc
    if not batch:
        raise ValidationError("provide at least one input")
    client_id = batch[0].client_id
    if any(item.client_id != client_id for item in batch[1:]):
        raise ValidationError("all client_id must be the same", field="client_id")
    return batch


class LoanApiClient:
    """Typed async client bound to one :class:`ClientCredential`."""

    def __init__(
        self,
        credential: ClientCredential,
        *,
        http: Optional[LoanHTTP] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._credential = credential
        # allow external http (for mocking)
        self._own_http = http is None
        self.http = http or LoanHTTP(
            base_url=credential.base_url,
            client_name=credential.name,
            transport=transport,
        )

    @property
    def credential(self) -> ClientCredential:
        return self._credential

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def aclose(self) -> None:
        if self._own_http:
            await self.http.aclose()

    # ---------------------------------------------------------------------
    # OAuth
    # ---------------------------------------------------------------------

    async def get_auth_token(self) -> BearerToken:
        """Client-credentials grant for this client."""

        return await exchange_token(
            self.http,
            self._credential,
            client_credentials_grant(self._credential),
            BearerToken,
        )

    async def get_user(self, bearer_token: Token) -> AuthenticatedUser:
        return await self.http.get(
            USER_PATH,
            AuthenticatedUser,
            endpoint="user",
            headers=bearer_headers(bearer_token),
        )

    async def exchange_code_auth(self, code: str) -> AuthenticatedUser:
        """Resolve the user behind an authorization *code*.

        The access token obtained for the lookup is used once and dropped.
        """

        token = await exchange_token(
            self.http,
            self._credential,
            authorization_code_grant(self._credential, code),
            AuthCodeToken,
        )
        return await self.get_user(token.access_token)

    # ---------------------------------------------------------------------
    # Loan API
    # ---------------------------------------------------------------------

    async def client_limit(self, bearer_token: Token, client_id: int) -> ClientLimit:
        return await self.http.get(
            f"{API_PREFIX}/client-limit/{client_id}",
            ClientLimit,
            endpoint="client_limit",
            headers=bearer_headers(bearer_token),
        )

    async def get_anchors(
        self,
        bearer_token: Token,
        client_id: int,
        pagination: Union[PaginationSpec, Mapping[str, Any], None] = None,
    ) -> AnchorPage:
        """List anchors for *client_id*; only set pagination fields are sent."""

        params = _pagination_params(pagination)
        return await self.http.get(
            f"{API_PREFIX}/{ANCHORS_PATH}/{client_id}",
            AnchorPage,
            endpoint="anchors",
            headers=bearer_headers(bearer_token),
            params=params or None,
        )

    async def calculate_loan(
        self, bearer_token: Token, inputs: Iterable[LoanInputLike]
    ) -> List[CalculatedLoanCost]:
        batch = _loan_batch(inputs)
        return await self.http.post(
            f"{API_PREFIX}/calc-loan",
            List[CalculatedLoanCost],
            endpoint="calc_loan",
            headers=bearer_headers(bearer_token),
            json=[item.model_dump(mode="json") for item in batch],
        )

    async def apply_for_loan(
        self, bearer_token: Token, inputs: Iterable[LoanInputLike]
    ) -> LoanApplicationResult:
        batch = _loan_batch(inputs)
        return await self.http.post(
            f"{API_PREFIX}/apply-loan",
            LoanApplicationResult,
            endpoint="apply_loan",
            headers=bearer_headers(bearer_token),
            json=[item.model_dump(mode="json") for item in batch],
        )
