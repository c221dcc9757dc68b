"""
Command-Line Interface for zkp-channel-verifier

Derives L2 public keys, addresses, and MPT keys from an L2 secret, and finds a
user's entry in a channel state snapshot.

Exit codes:
    0 - success
    1 - invalid input (malformed secret, slot, public key, or snapshot) or an
        invalid ZKP_CHANNEL_KEY_CACHE setting
    2 - curve or hash primitive failure (integration defect)
"""

import json
import sys
from pathlib import Path

import click

from zkp_channel_verifier import __version__, print_disclaimer
from zkp_channel_verifier.l2_identity.derivation import (
    derive_address,
    derive_address_from_public_key,
    derive_identity,
    derive_public_key,
    derive_storage_key,
)
from zkp_channel_verifier.l2_identity.exceptions import (
    L2KeyError,
    PrimitiveFailureError,
)
from zkp_channel_verifier.l2_identity.snapshot import (
    find_user_entries,
    find_user_entry,
    load_snapshot,
)
from zkp_channel_verifier.l2_identity.test_vectors import l2_key_vectors

EXIT_INPUT_ERROR = 1
EXIT_PRIMITIVE_FAILURE = 2

_SECRET_ENV_VAR = "ZKP_CHANNEL_L2_SECRET"


def _secret_option(func):
    return click.option(
        '--secret',
        envvar=_SECRET_ENV_VAR,
        prompt='L2 secret (hex)',
        hide_input=True,
        help=f'L2 secret as 64 hex digits (default: ${_SECRET_ENV_VAR}, else prompt)'
    )(func)


def _verbose_option(func):
    return click.option(
        '--verbose',
        is_flag=True,
        help='Print a traceback on failure'
    )(func)


def _fail(error: Exception, verbose: bool) -> None:
    if isinstance(error, PrimitiveFailureError):
        click.echo(click.style(f"\n✗ Internal error: {error}", fg="red"), err=True)
        exit_code = EXIT_PRIMITIVE_FAILURE
    else:
        click.echo(click.style(f"\n✗ Error: {error}", fg="red"), err=True)
        exit_code = EXIT_INPUT_ERROR
    if verbose:
        import traceback
        traceback.print_exc()
    sys.exit(exit_code)


@click.group()
@click.version_option(version=__version__)
def main():
    """
    zkp-channel-verifier - L2 key derivation tools

    Derives the L2 identity (Jubjub public key, Poseidon address) and the
    MPT storage keys used by the channel circuit and on-chain verifier.
    """
    pass


@main.command('public-key')
@_secret_option
@_verbose_option
def public_key(secret, verbose):
    """
    Print the compressed L2 public key (32 bytes).

    Examples:

        ZKP_CHANNEL_L2_SECRET=0x... zkp-channel-verifier public-key
    """
    try:
        click.echo(derive_public_key(secret))
    except L2KeyError as e:
        _fail(e, verbose)


@main.command()
@_secret_option
@_verbose_option
def address(secret, verbose):
    """Print the L2 address (20 bytes)."""
    try:
        click.echo(derive_address(secret))
    except L2KeyError as e:
        _fail(e, verbose)


@main.command('mpt-key')
@_secret_option
@click.option(
    '--slot',
    type=int,
    multiple=True,
    help='Storage slot (repeatable, default: 0)'
)
@_verbose_option
def mpt_key(secret, slot, verbose):
    """
    Print the MPT storage key for each requested slot.

    With a single slot only the key is printed; with several, one
    "slot key" pair per line.

    Examples:

        zkp-channel-verifier mpt-key --slot 0 --slot 1
    """
    slots = slot or (0,)
    try:
        if len(slots) == 1:
            click.echo(derive_storage_key(secret, slots[0]))
            return
        for value in slots:
            click.echo(f"{value} {derive_storage_key(secret, value)}")
    except L2KeyError as e:
        _fail(e, verbose)


@main.command()
@_secret_option
@click.option(
    '--slot',
    type=int,
    multiple=True,
    help='Storage slot to include (repeatable, default: 0)'
)
@click.option(
    '--format',
    'output_format',
    type=click.Choice(['console', 'json'], case_sensitive=False),
    default='console',
    help='Output format'
)
@_verbose_option
def identity(secret, slot, output_format, verbose):
    """Print public key, address, and MPT keys together."""
    slots = tuple(slot) or (0,)
    try:
        data = derive_identity(secret).to_dict(slots)
    except L2KeyError as e:
        _fail(e, verbose)
        return

    if output_format == 'json':
        click.echo(json.dumps(data, indent=2))
        return

    click.echo("\n" + "=" * 70)
    click.echo(click.style("L2 Identity", fg="cyan", bold=True))
    click.echo("=" * 70)
    click.echo(f"  Public key: {data['public_key']}")
    click.echo(f"  Address:    {data['address']}")
    for key_slot, key in data['mpt_keys'].items():
        click.echo(f"  MPT key [slot {key_slot}]: {key}")
    click.echo("=" * 70)


@main.command('address-from-public-key')
@click.argument('public_key_hex')
@_verbose_option
def address_from_public_key(public_key_hex, verbose):
    """Print the L2 address for a compressed public key."""
    try:
        click.echo(derive_address_from_public_key(public_key_hex))
    except L2KeyError as e:
        _fail(e, verbose)


@main.command()
@click.argument('snapshot_path', type=click.Path(exists=True, dir_okay=False))
@_secret_option
@click.option(
    '--slot',
    type=int,
    multiple=True,
    help='Storage slot (repeatable, default: slots listed in the snapshot)'
)
@click.option(
    '--format',
    'output_format',
    type=click.Choice(['console', 'json'], case_sensitive=False),
    default='console',
    help='Output format'
)
@_verbose_option
def lookup(snapshot_path, secret, slot, output_format, verbose):
    """
    Find the user's storage entries in a channel state snapshot.

    Exits with status 1 if no entry matches.

    Examples:

        zkp-channel-verifier lookup state_snapshot.json --slot 0
    """
    try:
        snapshot = load_snapshot(snapshot_path)
        if slot:
            results = [find_user_entry(snapshot, secret, value) for value in slot]
        else:
            results = find_user_entries(snapshot, secret)
    except L2KeyError as e:
        _fail(e, verbose)
        return

    found = [result for result in results if result.entry is not None]

    if output_format == 'json':
        click.echo(json.dumps(
            [
                {
                    "address": result.address,
                    "slot": result.slot,
                    "mpt_key": result.mpt_key,
                    "registered": result.registered,
                    "index": result.entry.index if result.entry else None,
                    "value": hex(result.entry.value) if result.entry else None,
                }
                for result in results
            ],
            indent=2,
        ))
    else:
        click.echo(f"State root: {snapshot.state_root}")
        for result in results:
            if result.entry is None:
                click.echo(click.style(
                    f"✗ slot {result.slot}: {result.mpt_key} not found", fg="yellow"
                ))
                continue
            click.echo(click.style(
                f"✓ slot {result.slot}: {result.mpt_key}", fg="green"
            ))
            click.echo(f"  index: {result.entry.index}")
            click.echo(f"  value: {result.entry.value} ({hex(result.entry.value)})")
            click.echo(f"  registered: {'yes' if result.registered else 'no'}")

    if not found:
        sys.exit(EXIT_INPUT_ERROR)


@main.command()
@click.option(
    '--path',
    'vectors_path',
    type=click.Path(exists=True, dir_okay=False),
    help='Golden vector file (default: bundled l2_key_vectors.json)'
)
def vectors(vectors_path):
    """Recompute a golden-vector file and report mismatches."""
    path = Path(vectors_path) if vectors_path else l2_key_vectors.VECTOR_FILE
    try:
        data = l2_key_vectors.load_vectors(path)
    except json.JSONDecodeError as e:
        click.echo(
            click.style(f"✗ {path.name}: invalid JSON: {e}", fg="red"), err=True
        )
        sys.exit(EXIT_INPUT_ERROR)

    errors = l2_key_vectors.validate_vectors(data)
    if errors:
        for error in errors:
            click.echo(click.style(f"✗ {path.name}: {error}", fg="red"), err=True)
        sys.exit(EXIT_INPUT_ERROR)
    click.echo(click.style(f"✓ {path.name}: OK", fg="green"))


@main.command()
def version():
    """Show version and disclaimer information."""
    click.echo(f"\nzkp-channel-verifier v{__version__}\n")
    print_disclaimer()


if __name__ == "__main__":
    main()
