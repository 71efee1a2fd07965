"""Error taxonomy shared by every layer.

Each error carries a stable ``code`` that the service layer copies into
:class:`~genesisctl.services.result.ServiceError`, plus a ``detail`` dict
for structured output.

INVARIANT: Nothing here is retried automatically. The only retrying
primitive is :func:`genesisctl.infrastructure.polling.wait_until`.
"""

from __future__ import annotations

from typing import Any


class GenesisError(Exception):
    """Base class for all genesisctl failures."""

    code = "GENESIS_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail


class SchemaError(GenesisError):
    """A structured file is malformed (bad YAML, missing field, wrong type)."""

    code = "SCHEMA_ERROR"


class MissingRootKey(GenesisError):
    code = "MISSING_ROOT_KEY"

    def __init__(self) -> None:
        super().__init__("Layout has no root_key; set it before generating genesis")


class MissingParticipant(GenesisError):
    """A name listed in the layout has no published identity."""

    code = "MISSING_PARTICIPANT"

    def __init__(self, name: str) -> None:
        super().__init__(f"Participant {name!r} has not published an identity", name=name)
        self.name = name


class DuplicateParticipant(GenesisError):
    code = "DUPLICATE_PARTICIPANT"

    def __init__(self, name: str) -> None:
        super().__init__(f"Participant {name!r} is listed more than once", name=name)
        self.name = name


class DuplicateAddress(GenesisError):
    code = "DUPLICATE_ADDRESS"

    def __init__(self, address: str, *, source: str = "balances") -> None:
        super().__init__(
            f"Address {address} appears more than once in {source}",
            address=address,
            source=source,
        )
        self.address = address


class DuplicateIdentity(GenesisError):
    """Two participants share an owner account or a consensus key."""

    code = "DUPLICATE_IDENTITY"

    def __init__(self, field: str, value: str, names: tuple[str, str]) -> None:
        super().__init__(
            f"Participants {names[0]!r} and {names[1]!r} share the same {field}",
            field=field,
            value=value,
            names=list(names),
        )


class StakeOutOfRange(GenesisError):
    code = "STAKE_OUT_OF_RANGE"

    def __init__(self, name: str, stake: int, min_stake: int, max_stake: int) -> None:
        super().__init__(
            f"Participant {name!r} stakes {stake}, outside [{min_stake}, {max_stake}]",
            name=name,
            stake=stake,
            min_stake=min_stake,
            max_stake=max_stake,
        )
        self.name = name


class InvalidArtifact(GenesisError):
    code = "INVALID_ARTIFACT"


class StorageError(GenesisError):
    """Store or filesystem failure."""

    code = "IO_ERROR"


class NotFound(StorageError):
    code = "NOT_FOUND"

    def __init__(self, path: str) -> None:
        super().__init__(f"No such entry in store: {path}", path=path)
        self.path = path


class AlreadyExists(GenesisError):
    code = "ALREADY_EXISTS"


class WaitTimeout(GenesisError):
    """A bounded wait passed its deadline."""

    code = "TIMEOUT"
