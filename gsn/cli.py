# gsn/cli.py
from __future__ import annotations

import logging

import click

from .bundle import generate_bundle
from .common import GsnError
from .logging_conf import setup_logging
from .mcp_contracts import CsrProfile
from .settings import Settings

log = logging.getLogger(__name__)

_SIGNING_HASHES = {"sha256", "sha-256"}


@click.group(help="A small cli program to run my most usual tools and commands in my day to day as a Software Engineer")
@click.pass_context
def cli(ctx: click.Context) -> None:
    settings = Settings.from_env()
    setup_logging(settings)
    ctx.obj = settings


@cli.command(help="Print the provided text")
@click.option("--name", "-n", default="", help="Name to print")
def show(name: str) -> None:
    if not name:
        click.echo("No name provided. Use -n or --name.")
        return
    click.echo(f"Hello, {name}!")


@cli.command(
    short_help="Generates private key, csr and signed certificate to be used",
    help="Generate a CSR and a signed certificate based on an specific hashing algorithm.",
)
@click.argument("hash_algorithm")
@click.pass_obj
def csr(settings: Settings, hash_algorithm: str) -> None:
    # signing is always ECDSA-with-SHA-256 whatever is requested
    if hash_algorithm.lower() not in _SIGNING_HASHES:
        log.warning("hash algorithm %r is ignored, signing with ECDSA-with-SHA-256", hash_algorithm)

    profile = CsrProfile(validity_days=settings.VALIDITY_DAYS)
    try:
        bundle = generate_bundle(profile)
    except GsnError as exc:
        log.debug("pipeline aborted at %s", exc.stage, exc_info=True)
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Private key PEM:\n{bundle.private_key_pem}")
    click.echo(f"CSR PEM:\n{bundle.csr_pem}")
    click.echo(f"PKCS#7 Certificate (Base64):\n{bundle.pkcs7_b64}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
