"""Command: publish a participant's identity into the store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from genesisctl.commands._base import GenesisCommand

if TYPE_CHECKING:
    from genesisctl.commands._context import AppContext

_PUBLISH_EXAMPLES = """\
  genesisctl publish alice --keys keys/alice/public-keys.yaml \\
      --validator-host validator.alice.example:6180 --stake 100000000000000
  genesisctl publish bob --keys keys/bob/public-keys.yaml \\
      --operator-keys keys/bob-op/public-keys.yaml \\
      --validator-host 10.0.0.2:6180 --full-node-host 10.0.0.2:6182 \\
      --stake 200000000000000 --commission 5"""

_KEY_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


@click.command(cls=GenesisCommand, examples=_PUBLISH_EXAMPLES)
@click.argument("name")
@click.option("--keys", "owner_keys", required=True, type=_KEY_FILE, help="Owner public-keys.yaml.")
@click.option("--operator-keys", type=_KEY_FILE, default=None, help="Operator public-keys.yaml.")
@click.option("--voter-keys", type=_KEY_FILE, default=None, help="Voter public-keys.yaml.")
@click.option("--validator-host", required=True, help="Validator host:port.")
@click.option("--full-node-host", default=None, help="Full node host:port.")
@click.option("--stake", "stake_amount", required=True, type=click.IntRange(min=0), help="Stake amount.")
@click.option(
    "--commission",
    "commission_percentage",
    type=click.IntRange(0, 100),
    default=0,
    show_default=True,
    help="Commission percentage.",
)
@click.pass_obj
def publish(
    app: AppContext,
    name: str,
    owner_keys: Path,
    operator_keys: Path | None,
    voter_keys: Path | None,
    validator_host: str,
    full_node_host: str | None,
    stake_amount: int,
    commission_percentage: int,
) -> None:
    """Publish NAME's validator identity."""
    from genesisctl.errors import GenesisError
    from genesisctl.services.publish import PublishService, build_bundle
    from genesisctl.services.result import ServiceResult

    try:
        bundle = build_bundle(
            name,
            owner_keys.read_bytes(),
            validator_host=validator_host,
            full_node_host=full_node_host,
            stake_amount=stake_amount,
            commission_percentage=commission_percentage,
            operator_keys=operator_keys.read_bytes() if operator_keys else None,
            voter_keys=voter_keys.read_bytes() if voter_keys else None,
        )
    except GenesisError as exc:
        app.emit(ServiceResult.failure("publish", exc))
        return
    app.emit(PublishService(app.store, app.plugins).publish(name, bundle))
