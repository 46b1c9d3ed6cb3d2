"""
Command-line interface for eip712-vc.

Usage:
    eip712-vc separator --domain domain.json
    eip712-vc typed-data credential.json --domain domain.json --types types.json
    eip712-vc issue credential.json --domain domain.json --types types.json
    eip712-vc verify vc.json --domain domain.json --types types.json
    cat vc.json | eip712-vc verify - --domain domain.json --types types.json
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable

import click
import httpx
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from eip712_vc.domain import DomainConfigError, SigningDomain
from eip712_vc.eip712vc import EIP712VC
from eip712_vc.schema import CredentialEncoding, TypeMapError

console = Console()

ENCODINGS = [encoding.value for encoding in CredentialEncoding]


def load_json(source: str) -> Any:
    """Load JSON from file, URL, or stdin.

    Args:
        source: File path, URL, or "-" for stdin.

    Returns:
        Parsed JSON.
    """
    if source == "-":
        return json.loads(sys.stdin.read())

    if source.startswith("http://") or source.startswith("https://"):
        with httpx.Client(timeout=30.0) as client:
            response = client.get(
                source,
                headers={"Accept": "application/vc+ld+json, application/json"},
            )
            response.raise_for_status()
            return response.json()

    path = Path(source)
    if not path.exists():
        raise click.ClickException(f"File not found: {source}")

    with path.open() as f:
        return json.load(f)


def split_types(types: dict[str, Any]) -> tuple[dict[str, Any], list[dict[str, str]] | None]:
    """Separate an ``Issuer`` entry from the subject types of a types file."""
    subject_types = dict(types)
    issuer_type = subject_types.pop("Issuer", None)
    return subject_types, issuer_type


def echo_json(data: Any) -> None:
    """Print data as indented JSON on stdout."""
    click.echo(json.dumps(data, indent=2))


def format_result(valid: bool, credential: dict[str, Any], issuer: str) -> None:
    """Format and print verification result."""
    if valid:
        status_icon = "[bold green]VALID[/]"
        panel_style = "green"
    else:
        status_icon = "[bold red]INVALID[/]"
        panel_style = "red"

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="dim")
    table.add_column("Value")

    table.add_row("Status", status_icon)
    if credential.get("id"):
        table.add_row("Credential ID", str(credential["id"]))
    table.add_row("Issuer", issuer)

    proof = credential.get("proof") or {}
    if proof:
        table.add_row("Proof Type", str(proof.get("type", "unknown")))
        table.add_row("Verification Method", str(proof.get("verificationMethod", "unknown")))
        table.add_row("Created", str(proof.get("created", "unknown")))

    console.print(Panel(table, title="Verification Result", border_style=panel_style))


def credential_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """Add the --domain, --types and --encoding options shared by commands."""
    f = click.option(
        "--encoding",
        type=click.Choice(ENCODINGS),
        default=CredentialEncoding.W3C.value,
        show_default=True,
        help="Credential field naming",
    )(f)
    f = click.option(
        "--types",
        "types_source",
        required=True,
        help="JSON file with CredentialSubject (and Issuer) types",
    )(f)
    f = click.option("--domain", "domain_source", required=True, help="JSON file with the signing domain")(f)
    return f


def _build_context(domain_source: str, types_source: str) -> tuple[EIP712VC, dict, list | None]:
    eip712vc = EIP712VC(SigningDomain.from_mapping(load_json(domain_source)))
    subject_types, issuer_type = split_types(load_json(types_source))
    return eip712vc, subject_types, issuer_type


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option()
def main(verbose: bool) -> None:
    """Issue and verify EIP-712 signed Verifiable Credentials."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("--domain", "domain_source", required=True, help="JSON file with the signing domain")
def separator(domain_source: str) -> None:
    """Print the EIP-712 domain separator."""
    try:
        domain = SigningDomain.from_mapping(load_json(domain_source))
    except DomainConfigError as e:
        raise click.ClickException(str(e)) from e
    click.echo(domain.domain_separator())


@main.command("typed-data")
@click.argument("source", required=True)
@credential_options
def typed_data(source: str, domain_source: str, types_source: str, encoding: str) -> None:
    """Print the typed-data envelope for an unsigned credential."""
    try:
        eip712vc, subject_types, issuer_type = _build_context(domain_source, types_source)
        envelope = eip712vc.get_typed_data(
            load_json(source), subject_types, CredentialEncoding(encoding), issuer_type
        )
    except (DomainConfigError, TypeMapError) as e:
        raise click.ClickException(str(e)) from e
    echo_json(envelope)


@main.command()
@click.argument("source", required=True)
@credential_options
@click.option(
    "--private-key",
    envvar="EIP712VC_PRIVATE_KEY",
    required=True,
    help="Issuer private key (hex), or set EIP712VC_PRIVATE_KEY",
)
def issue(
    source: str,
    domain_source: str,
    types_source: str,
    encoding: str,
    private_key: str,
) -> None:
    """Sign a credential and print the verifiable credential."""
    try:
        eip712vc, subject_types, issuer_type = _build_context(domain_source, types_source)
        envelope = eip712vc.get_typed_data(
            load_json(source), subject_types, CredentialEncoding(encoding), issuer_type
        )
        credential = eip712vc.create_verifiable_credential(private_key, envelope)
    except click.ClickException:
        raise
    except Exception as e:
        raise click.ClickException(str(e)) from e
    echo_json(credential)


@main.command()
@click.argument("source", required=True)
@credential_options
@click.option("--issuer", help="Claimed issuer address (default: issuer.ethereumAddress)")
@click.option(
    "--json-output",
    is_flag=True,
    help="Output result as JSON",
)
def verify(
    source: str,
    domain_source: str,
    types_source: str,
    encoding: str,
    issuer: str | None,
    json_output: bool,
) -> None:
    """Verify an EIP-712 signed Verifiable Credential.

    SOURCE can be:
    - A file path (e.g., vc.json)
    - A URL (e.g., https://example.com/credentials/123)
    - "-" to read from stdin
    """
    try:
        credential = load_json(source)
        eip712vc, subject_types, issuer_type = _build_context(domain_source, types_source)

        if issuer is None:
            claimed = credential.get("issuer")
            issuer = claimed.get("ethereumAddress") if isinstance(claimed, dict) else None
        if not issuer:
            _report_error("No issuer address given and none in credential", json_output)

        valid = asyncio.run(
            eip712vc.verify_verifiable_credential(
                issuer,
                credential,
                subject_types,
                encoding=CredentialEncoding(encoding),
                issuer_type=issuer_type,
            )
        )

        if json_output:
            echo_json(
                {
                    "valid": valid,
                    "credential_id": credential.get("id"),
                    "issuer": issuer,
                }
            )
        else:
            format_result(valid, credential, issuer)

        sys.exit(0 if valid else 1)

    except click.ClickException:
        raise

    except json.JSONDecodeError as e:
        _report_error(f"Invalid JSON: {e}", json_output)

    except httpx.HTTPError as e:
        _report_error(f"HTTP error: {e}", json_output)

    except Exception as e:
        _report_error(str(e), json_output)


def _report_error(message: str, json_output: bool) -> None:
    if json_output:
        echo_json({"error": message})
    else:
        console.print(f"[red]Error:[/] {message}")
    sys.exit(2)


if __name__ == "__main__":
    main()
