# cli.py
import asyncio
import sys

import click

from config import ENV_FILE, HOST, LOG_LEVEL, PORT, SERVER_URL
from .client import GreetingClient
from .errors import CryptoError, KeyConfigError, TransportError
from .keystore import KeyConfig, KeyStore, unescape_pem
from .logger_config import setup_logging
from .provisioner import generate, public_env_line, write_env_file


@click.group()
def cli():
    """Asymmetric request/response encryption demo."""
    setup_logging(LOG_LEVEL)


@cli.command()
@click.option("--bits", default=2048, show_default=True, help="RSA modulus size.")
@click.option("--env-file", type=click.Path(dir_okay=False), default=str(ENV_FILE), show_default=True)
@click.option("--force", is_flag=True, help="Overwrite an existing file.")
def keygen(bits, env_file, force):
    """Generate a key pair and write it to a dotenv file."""
    try:
        key_pair = generate(bits)
        path = write_env_file(key_pair, env_file, overwrite=force)
    except (ValueError, FileExistsError) as e:
        raise click.ClickException(str(e))

    # Only the public half is ever shown
    click.echo(f"Keys saved to {path}\n")
    click.echo("Public Key:")
    click.echo(key_pair.public_key)
    click.echo("Keep the private key secure and never commit it to version control!", err=True)


@cli.command("export-public")
@click.option("--env-file", type=click.Path(dir_okay=False), default=str(ENV_FILE), show_default=True)
def export_public(env_file):
    """Print the public key line for a client-side .env file."""
    try:
        config = KeyConfig.from_env_file(env_file)
        # Parse it to make sure what we hand out is a usable key
        KeyStore(config).load_public_key()
    except KeyConfigError as e:
        raise click.ClickException(str(e))

    click.echo(public_env_line(unescape_pem(config.public_key_pem)))


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.option("--url", default=SERVER_URL, show_default=True, help="Server base URL.")
@click.option("--env-file", type=click.Path(dir_okay=False), default=None,
              help="Read RSA_PUBLIC_KEY from this file instead of the environment.")
def greet(names, url, env_file):
    """Send each NAME encrypted to the server and print the decrypted greeting."""
    try:
        config = KeyConfig.from_env_file(env_file) if env_file else KeyConfig.from_env()
        public_key = KeyStore(config).load_public_key()
    except KeyConfigError as e:
        raise click.ClickException(str(e))

    client = GreetingClient(public_key, base_url=url)
    failures = asyncio.run(_greet_all(client, names))
    if failures:
        sys.exit(1)


def _printable(name: str) -> str:
    # Names from argv may carry surrogate escapes for undecodable bytes
    return name.encode("utf-8", "backslashreplace").decode("utf-8")


async def _greet_all(client: GreetingClient, names) -> int:
    failures = 0
    for name in names:
        try:
            greeting = await client.greet(name)
        except TransportError as e:
            click.echo(f"{_printable(name)}: could not reach the server ({e})", err=True)
        except CryptoError as e:
            click.echo(f"{_printable(name)}: secure communication failed ({e})", err=True)
        else:
            click.echo(greeting)
            continue
        failures += 1
    return failures


@cli.command()
@click.option("--host", default=HOST, show_default=True)
@click.option("--port", default=PORT, show_default=True, type=int)
def serve(host, port):
    """Run the greeting service."""
    from main import run
    run(host=host, port=port)


if __name__ == "__main__":
    cli()
