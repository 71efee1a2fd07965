"""LayoutService — create, edit, and inspect ``layout.yaml`` in the store.

Pipeline for edits: LOAD → MUTATE → WRITE → NOTIFY
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from genesisctl.domain import layout as layout_ops
from genesisctl.domain.accounts import load_balances, load_vesting
from genesisctl.domain.layout import (
    BALANCES_FILE,
    EMPLOYEE_VESTING_ACCOUNTS_FILE,
    LAYOUT_FILE,
    LayoutDescriptor,
    build_template,
    load_layout,
    serialize_layout,
)
from genesisctl.errors import AlreadyExists, GenesisError, SchemaError
from genesisctl.infrastructure.store.base import normalize_store_path
from genesisctl.services.base import BaseService
from genesisctl.services.result import ServiceResult

if TYPE_CHECKING:
    from collections.abc import Sequence


def _store_reference(path: str) -> str:
    try:
        return normalize_store_path(path)
    except ValueError as exc:
        raise SchemaError(str(exc), path=path) from exc


def _layout_payload(layout: LayoutDescriptor) -> dict[str, object]:
    return {"path": LAYOUT_FILE, "layout": layout.to_document()}


class LayoutService(BaseService):
    """Owns the coordinator's side of the layout file."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def template() -> ServiceResult:
        """Render the default layout as YAML text without touching any store."""
        layout = build_template()
        return ServiceResult(
            ok=True,
            op="layout_template",
            data={"text": serialize_layout(layout).decode("utf-8"), "layout": layout.to_document()},
        )

    def write_template(self, *, force: bool = False) -> ServiceResult:
        """Write the default layout to ``layout.yaml`` in the store."""
        op = "layout_template"
        try:
            if self._store.exists(LAYOUT_FILE) and not force:
                raise AlreadyExists(
                    f"{LAYOUT_FILE} already exists in {self._store.location}",
                    path=LAYOUT_FILE,
                )
            layout = build_template()
            self._store.write(LAYOUT_FILE, serialize_layout(layout))
        except GenesisError as exc:
            return ServiceResult.failure(op, exc)
        return ServiceResult(ok=True, op=op, data=_layout_payload(layout))

    def setup(self, layout_data: bytes, *, force: bool = False) -> ServiceResult:
        """Initialize the store and seed it with the given layout document.

        The document is parsed first, so a bad layout never leaves behind
        a freshly initialized store.
        """
        op = "layout_setup"
        warnings: list[str] = []
        try:
            layout = load_layout(layout_data)
            self._store.init(force=force)
            self._store.write(LAYOUT_FILE, serialize_layout(layout))
        except GenesisError as exc:
            return ServiceResult.failure(op, exc)

        self._dispatch_event("post_store_init", {"location": self._store.location}, warnings)
        self._dispatch_event(
            "post_layout_update",
            {"participants": list(layout.participants), "chain_id": layout.chain_id},
            warnings,
        )
        data = _layout_payload(layout)
        data["location"] = self._store.location
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def update(
        self,
        *,
        root_key: str | None = None,
        participants: Sequence[str] = (),
        chain_id: int | str | None = None,
        is_test: bool | None = None,
        balances_file: str | None = None,
        vesting_file: str | None = None,
        balances: bytes | None = None,
        vesting: bytes | None = None,
    ) -> ServiceResult:
        """Apply the given edits to the stored layout and rewrite it.

        *balances* / *vesting* are document contents: they are validated,
        stored (under the default names unless a path is given), and
        referenced from the layout.
        *balances_file* / *vesting_file* only set the reference.
        """
        op = "layout_update"
        warnings: list[str] = []
        changed: list[str] = []
        try:
            # ── LOAD ─────────────────────────────────────────────
            layout = load_layout(self._store.read(LAYOUT_FILE))

            # ── MUTATE ───────────────────────────────────────────
            if root_key is not None:
                layout = layout_ops.merge_root_key(layout, root_key)
                changed.append("root_key")
            if participants:
                layout = layout_ops.merge_participants(layout, participants)
                changed.append("users")
            if chain_id is not None:
                layout = layout_ops.set_chain_id(layout, chain_id)
                changed.append("chain_id")
            if is_test is not None:
                layout = layout_ops.set_test_flag(layout, is_test)
                changed.append("is_test")
            if balances is not None:
                load_balances(balances)
                balances_file = balances_file or BALANCES_FILE
            if vesting is not None:
                load_vesting(vesting)
                vesting_file = vesting_file or EMPLOYEE_VESTING_ACCOUNTS_FILE
            if balances_file is not None:
                layout = layout_ops.set_balances_file(layout, _store_reference(balances_file))
                changed.append("balances_file")
            if vesting_file is not None:
                layout = layout_ops.set_vesting_file(layout, _store_reference(vesting_file))
                changed.append("vesting_file")

            # ── WRITE ────────────────────────────────────────────
            if balances is not None and layout.balances_file is not None:
                self._store.write(layout.balances_file, balances)
            if vesting is not None and layout.vesting_file is not None:
                self._store.write(layout.vesting_file, vesting)
            self._store.write(LAYOUT_FILE, serialize_layout(layout))
        except GenesisError as exc:
            return ServiceResult.failure(op, exc)

        # ── NOTIFY ───────────────────────────────────────────────
        self._dispatch_event(
            "post_layout_update",
            {"participants": list(layout.participants), "chain_id": layout.chain_id},
            warnings,
        )
        data = _layout_payload(layout)
        data["changed"] = changed
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def show(self) -> ServiceResult:
        op = "layout_show"
        try:
            layout = load_layout(self._store.read(LAYOUT_FILE))
        except GenesisError as exc:
            return ServiceResult.failure(op, exc)
        warnings = [] if layout.root_key else ["root_key is not set"]
        return ServiceResult(ok=True, op=op, data=_layout_payload(layout), warnings=warnings)
