"""Data models for the loan-origination client.

``ClientCredential`` is the only model the library builds itself; everything
else is the decoded body of one successful call.
"""
from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr

__all__ = [
    "ClientCredential",
    "BearerToken",
    "AuthCodeToken",
    "AuthenticatedUser",
    "PaginationSpec",
    "LoanInput",
    "ClientLimit",
    "CalculatedLoanCost",
    "LoanApplicationResult",
    "Anchor",
    "AnchorPage",
]


class ClientCredential(BaseModel):
    """Registered client of the loan service.

    ``secret_key`` is excluded from every dump and masked in ``repr``. Two
    credentials are equal when they share ``(base_url, public_key)``.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str
    secret_key: SecretStr = Field(exclude=True, repr=False)
    public_key: str
    name: str
    logo_url: str
    redirect_url: str

    @property
    def identity(self) -> tuple[str, str]:
        return (self.base_url, self.public_key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClientCredential):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)


class BearerToken(BaseModel):
    """Client-credentials grant response."""

    access_token: str
    token_type: str
    expires_in: int
    scope: str


class AuthCodeToken(BearerToken):
    """Authorization-code grant response."""

    refresh_token: str


class AuthenticatedUser(BaseModel):
    id: int
    email: str
    company_name: str
    anchor_id: int


class PaginationSpec(BaseModel):
    """Anchor listing pagination.

    The service defaults to page 1 and 20 items (max 100). Unset fields are
    left out of the query string so those defaults apply remotely.
    """

    page: Optional[int] = None
    page_size: Optional[int] = None
    order: Optional[Literal["id", "-id"]] = None

    def to_params(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class LoanInput(BaseModel):
    amount: float
    anchor_id: int
    client_id: int
    loan_term: int
    loan_type: str
    metadata: Any = Field(default_factory=dict)


class ClientLimit(BaseModel):
    remaining_limit: float
    total_limit: float
    used_limit: float


class CalculatedLoanCost(BaseModel):
    excise_duty: float
    facility_fee: float
    insurance: float
    interest_amount: float
    oauth_apply: LoanInput
    processing_fee: float
    total: float


class LoanApplicationResult(BaseModel):
    message: str


class Anchor(BaseModel):
    anchor_id: int
    business_logo: Optional[str] = None
    business_type: Optional[str] = None
    company_email: Optional[str] = None
    company_name: Optional[str] = None
    created_at: str
    loaned_amount: float
    max_loan_amount: float
    tener_id: int
    updated_at: str


class AnchorPage(BaseModel):
    data: List[Anchor] = Field(default_factory=list)
    page: int
    page_size: int
    total: int
