"""Initial account balances and employee vesting records.

Both files are YAML sequences. An empty vesting sequence is the common case
and means "no vesting".
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from genesisctl.domain.serialization import dump_yaml, load_yaml, validate_model
from genesisctl.domain.types import U64_MAX, Address
from genesisctl.errors import DuplicateAddress, SchemaError


class AccountBalanceEntry(BaseModel):
    """One ``{account_address, balance}`` record."""

    model_config = {"frozen": True, "extra": "forbid"}

    account_address: Address
    balance: int = Field(ge=0, le=U64_MAX)


class EmployeeVestingEntry(BaseModel):
    """Vesting schedule keyed by beneficiary.

    Only ``beneficiary`` is interpreted; every other field is carried to the
    genesis builder untouched.
    """

    model_config = {"frozen": True, "extra": "allow"}

    beneficiary: Address

    def schedule(self) -> dict[str, Any]:
        """The opaque part of the record."""
        return dict(self.model_extra or {})


def _load_sequence(data: bytes | str, what: str) -> list[Any]:
    raw = load_yaml(data, what=what)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise SchemaError(f"Invalid {what}: expected a sequence of records", file=what)
    return raw


def load_balances(data: bytes | str, *, what: str = "balances") -> list[AccountBalanceEntry]:
    """Parse a balances file.

    Raises:
        SchemaError: malformed records, or a total that overflows u64.
        DuplicateAddress: an address listed twice.
    """
    entries = [
        validate_model(AccountBalanceEntry, item, what=f"{what}[{i}]")
        for i, item in enumerate(_load_sequence(data, what))
    ]
    seen: set[str] = set()
    total = 0
    for entry in entries:
        if entry.account_address in seen:
            raise DuplicateAddress(entry.account_address, source=what)
        seen.add(entry.account_address)
        total += entry.balance
    if total > U64_MAX:
        raise SchemaError(f"Total balance in {what} overflows u64", file=what, total=total)
    return entries


def load_vesting(data: bytes | str, *, what: str = "employee vesting") -> list[EmployeeVestingEntry]:
    entries = [
        validate_model(EmployeeVestingEntry, item, what=f"{what}[{i}]")
        for i, item in enumerate(_load_sequence(data, what))
    ]
    seen: set[str] = set()
    for entry in entries:
        if entry.beneficiary in seen:
            raise DuplicateAddress(entry.beneficiary, source=what)
        seen.add(entry.beneficiary)
    return entries


def serialize_balances(entries: list[AccountBalanceEntry]) -> bytes:
    return dump_yaml([e.model_dump(mode="json") for e in entries]).encode("utf-8")


def serialize_vesting(entries: list[EmployeeVestingEntry]) -> bytes:
    return dump_yaml([e.model_dump(mode="json") for e in entries]).encode("utf-8")
