"""Layout — the bootstrap manifest naming who joins genesis and on what terms.

The YAML file at :data:`LAYOUT_FILE` may be produced by
:func:`build_template` + the mutation helpers below, or edited by hand. Either
way :func:`load_layout` is the single source of truth for what a valid layout
is.

INVARIANT: Mutations never touch an existing descriptor; each returns a new,
re-validated copy. Writers rewrite the whole file.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Self

from pydantic import BaseModel, Field, model_validator

from genesisctl.domain.serialization import dump_yaml, load_yaml, validate_model
from genesisctl.domain.types import ChainId, NamedChain, PublicKeyHex, is_valid_name
from genesisctl.errors import DuplicateParticipant, SchemaError

LAYOUT_FILE = "layout.yaml"
BALANCES_FILE = "balances.yaml"
EMPLOYEE_VESTING_ACCOUNTS_FILE = "employee_vesting_accounts.yaml"

# Octas-style integer stake units.
DEFAULT_MIN_STAKE = 100_000_000_000_000
DEFAULT_MAX_STAKE = 100_000_000_000_000_000


class LayoutDescriptor(BaseModel):
    """Typed view of ``layout.yaml``.

    ``participants`` is stored under the ``users`` key on disk.
    """

    model_config = {"frozen": True, "populate_by_name": True, "extra": "forbid"}

    root_key: PublicKeyHex | None = None
    chain_id: ChainId = NamedChain.TESTING.value
    participants: list[str] = Field(default_factory=list, alias="users")
    is_test: bool = True
    balances_file: str | None = None
    vesting_file: str | None = None

    allow_new_validators: bool = False
    epoch_duration_secs: int = Field(default=7200, gt=0)
    min_stake: int = Field(default=DEFAULT_MIN_STAKE, ge=0)
    max_stake: int = Field(default=DEFAULT_MAX_STAKE, ge=0)
    recurring_lockup_duration_secs: int = Field(default=86400, gt=0)
    required_proposer_stake: int = Field(default=DEFAULT_MIN_STAKE, ge=0)
    rewards_apy_percentage: int = Field(default=10, ge=0, le=100)
    voting_duration_secs: int = Field(default=43200, gt=0)
    voting_power_increase_limit: int = Field(default=20, gt=0, le=50)

    @model_validator(mode="after")
    def _check_ranges(self) -> Self:
        if self.min_stake > self.max_stake:
            raise ValueError("min_stake must not exceed max_stake")
        if self.voting_duration_secs >= self.recurring_lockup_duration_secs:
            raise ValueError("voting_duration_secs must be less than the lockup duration")
        for name in self.participants:
            if not is_valid_name(name):
                raise ValueError(f"invalid participant name {name!r}")
        # DuplicateParticipant is not a ValueError, so it escapes pydantic as-is.
        check_participants(self.participants)
        return self

    def to_document(self) -> dict[str, Any]:
        """On-disk mapping, keyed the way ``layout.yaml`` spells its fields."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Construction, parsing, serialization
# ---------------------------------------------------------------------------


def build_template() -> LayoutDescriptor:
    """Default layout: no participants, no root key, test chain."""
    return LayoutDescriptor()


def check_participants(names: Iterable[str]) -> None:
    """Raise :class:`DuplicateParticipant` for the first repeated name (exact match)."""
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise DuplicateParticipant(name)
        seen.add(name)


def load_layout(data: bytes | str) -> LayoutDescriptor:
    """Parse ``layout.yaml`` content.

    Raises:
        SchemaError: malformed YAML, unknown or missing fields, wrong types.
        DuplicateParticipant: the same name appears twice in ``users``.
    """
    raw = load_yaml(data, what=LAYOUT_FILE)
    if not isinstance(raw, dict):
        raise SchemaError(f"Invalid {LAYOUT_FILE}: expected a mapping", file=LAYOUT_FILE)
    users = raw.get("users")
    if isinstance(users, list):
        check_participants(u for u in users if isinstance(u, str))
    return validate_model(LayoutDescriptor, raw, what=LAYOUT_FILE)


def serialize_layout(layout: LayoutDescriptor) -> bytes:
    """Render *layout* as the YAML document :func:`load_layout` accepts."""
    return dump_yaml(layout.to_document()).encode("utf-8")


# ---------------------------------------------------------------------------
# Pure mutations
# ---------------------------------------------------------------------------


def _replace(layout: LayoutDescriptor, **changes: Any) -> LayoutDescriptor:
    data = layout.model_dump()
    data.update(changes)
    return validate_model(LayoutDescriptor, data, what=LAYOUT_FILE)


def merge_root_key(layout: LayoutDescriptor, key: str | bytes) -> LayoutDescriptor:
    return _replace(layout, root_key=key)


def merge_participants(layout: LayoutDescriptor, names: Iterable[str]) -> LayoutDescriptor:
    """Append *names* not yet listed, preserving order.

    A name repeated within *names* itself is a caller error and raises
    :class:`DuplicateParticipant`; names already in the layout are skipped.
    """
    incoming = list(names)
    check_participants(incoming)
    merged = list(layout.participants)
    merged.extend(n for n in incoming if n not in layout.participants)
    return _replace(layout, participants=merged)


def set_chain_id(layout: LayoutDescriptor, chain_id: int | str) -> LayoutDescriptor:
    return _replace(layout, chain_id=chain_id)


def set_test_flag(layout: LayoutDescriptor, is_test: bool) -> LayoutDescriptor:
    return _replace(layout, is_test=is_test)


def set_balances_file(layout: LayoutDescriptor, path: str | None) -> LayoutDescriptor:
    return _replace(layout, balances_file=path)


def set_vesting_file(layout: LayoutDescriptor, path: str | None) -> LayoutDescriptor:
    return _replace(layout, vesting_file=path)
