"""Client Registry: build ``ClientCredential`` values from configuration records.

Records are plain mappings (usually decoded JSON). Keys may be given inline or
injected from a :class:`~supremo_loan.config.ConfigProvider` by
:func:`inject_keys`, which derives the lookup prefix from the client's name::

    "bank name" -> BANK_NAME_SECRET_KEY / BANK_NAME_PUBLIC_KEY
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Optional, Sequence

from pydantic import TypeAdapter

from .client import LoanApiClient
from .config import ConfigProvider, EnvConfigProvider
from .errors import ValidationError
from .models import ClientCredential

__all__ = [
    "REQUIRED_FIELDS",
    "build_one",
    "build_many",
    "inject_keys",
    "key_prefix",
    "dump_clients",
    "ClientRegistry",
]

_LOG = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "base_url",
    "secret_key",
    "public_key",
    "name",
    "logo_url",
    "redirect_url",
)

_CREDENTIALS = TypeAdapter(List[ClientCredential])


def _require_array(records: Any) -> Sequence[Any]:
    if isinstance(records, (list, tuple)):
        return records
    raise ValidationError(
        "clients config is not an array; use build_one for a single record"
    )


def _require_str(record: Mapping, field: str) -> str:
    value = record.get(field)
    if value is None:
        raise ValidationError(f"{field} is missing", field=field)
    if not isinstance(value, str):
        raise ValidationError(f"{field} is not string", field=field)
    return value


def build_one(record: Mapping[str, Any]) -> ClientCredential:
    """Build a credential from one record; the first bad field raises."""

    if not isinstance(record, Mapping):
        raise ValidationError("client config is not an object")
    values = {field: _require_str(record, field) for field in REQUIRED_FIELDS}
    return ClientCredential(**values)


def build_many(records: Sequence[Mapping[str, Any]]) -> List[ClientCredential]:
    """Build credentials in input order; one invalid record fails the batch."""

    credentials: List[ClientCredential] = []
    for index, record in enumerate(_require_array(records)):
        try:
            credentials.append(build_one(record))
        except ValidationError as exc:
            raise ValidationError(
                f"client #{index}: {exc}", field=exc.field
            ) from exc
    _LOG.debug("Built %d client credentials", len(credentials))
    return credentials


def key_prefix(name: str) -> str:
    return name.replace(" ", "_").upper()


def inject_keys(
    records: Sequence[Mapping[str, Any]],
    config: Optional[ConfigProvider] = None,
) -> List[Dict[str, Any]]:
    """Return copies of *records* with ``secret_key``/``public_key`` filled in.

    Values come from ``<PREFIX>_SECRET_KEY`` and ``<PREFIX>_PUBLIC_KEY`` where
    the prefix is :func:`key_prefix` of the record's ``name``. Any missing value
    fails the whole call.
    """

    config = config if config is not None else EnvConfigProvider()
    injected: List[Dict[str, Any]] = []
    for record in _require_array(records):
        if not isinstance(record, Mapping):
            raise ValidationError("client config is not an object")
        prefix = key_prefix(_require_str(record, "name"))
        keys = {}
        for field in ("secret_key", "public_key"):
            env_key = f"{prefix}_{field.upper()}"
            value = config.get(env_key)
            if not value:
                raise ValidationError(f"env value {env_key} is not set", field=field)
            keys[field] = value
        injected.append({**record, **keys})
    return injected


def dump_clients(credentials: Sequence[ClientCredential]) -> str:
    """Serialize credentials to a JSON array of their public shape."""

    return _CREDENTIALS.dump_json(list(credentials)).decode()


class ClientRegistry:
    """Named collection of credentials, unique by identity and by name."""

    def __init__(self, config: Optional[ConfigProvider] = None) -> None:
        self._config = config
        self._clients: Dict[str, ClientCredential] = {}

    def load(
        self, records: Sequence[Mapping[str, Any]], *, inject: bool = True
    ) -> List[ClientCredential]:
        """Register a batch; nothing is stored unless the whole batch fits."""

        if inject:
            records = inject_keys(records, self._config)
        credentials = build_many(records)
        self._check_conflicts(credentials)
        for credential in credentials:
            self._add(credential)
        return credentials

    def register(self, credential: ClientCredential) -> None:
        self._check_conflicts([credential])
        self._add(credential)

    def _check_conflicts(self, credentials: Sequence[ClientCredential]) -> None:
        names = set(self._clients)
        identities = {c.identity for c in self._clients.values()}
        for credential in credentials:
            if credential.name in names:
                raise ValidationError(
                    f"client {credential.name!r} already registered", field="name"
                )
            if credential.identity in identities:
                raise ValidationError(
                    f"client with base_url {credential.base_url!r} and the same "
                    "public_key already registered",
                    field="public_key",
                )
            names.add(credential.name)
            identities.add(credential.identity)

    def _add(self, credential: ClientCredential) -> None:
        self._clients[credential.name] = credential
        _LOG.info("Registered client", extra={"client": credential.name})

    def get(self, name: str) -> ClientCredential:
        return self._clients[name]

    def client(self, name: str, **kwargs: Any) -> LoanApiClient:
        """Open a :class:`LoanApiClient` for *name*."""

        return LoanApiClient(self.get(name), **kwargs)

    def __contains__(self, name: object) -> bool:
        return name in self._clients

    def __iter__(self) -> Iterator[ClientCredential]:
        return iter(self._clients.values())

    def __len__(self) -> int:
        return len(self._clients)
