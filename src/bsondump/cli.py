"""Command-line interface for bsondump."""

import logging
import sys
import click
from pathlib import Path
from . import __version__
from .dumper import BSONDumper
from .types import ProcessingError

BSON_SUFFIX = ".bson"


def resolve_input_path(filename: Path) -> Path:
    """
    Find the file to dump, trying ``<filename>.bson`` when ``filename`` is missing.

    Raises:
        click.FileError: If neither path exists
    """
    if filename.exists():
        return filename
    if filename.suffix != BSON_SUFFIX:
        candidate = filename.with_name(filename.name + BSON_SUFFIX)
        if candidate.exists():
            return candidate
    raise click.FileError(str(filename), hint="no such file")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@click.command()
@click.version_option(version=__version__)
@click.argument('filename', type=click.Path(dir_okay=False, path_type=Path))
@click.option('--txn', is_flag=True, help='Include txn-revno and txn-queue')
@click.option('--ordered', is_flag=True, help='Keep field order and repeated keys')
@click.option('--check', is_flag=True, help='Only check document framing, print a summary')
@click.option('--profile', is_flag=True, help='Log timing and memory statistics')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
def main(filename: Path, txn: bool, ordered: bool, check: bool, profile: bool, verbose: bool):
    """Dump a bson file to json."""
    configure_logging(verbose)
    if profile and not verbose:
        logging.getLogger("bsondump").setLevel(logging.INFO)

    path = resolve_input_path(filename)
    dumper = BSONDumper(include_txn=txn, ordered=ordered, enable_profiling=profile,
                        logger=logging.getLogger("bsondump"))

    try:
        data = dumper.read_file(path)
        if check:
            result = dumper.error_handler.validate_input(data)
            if not result.is_valid:
                raise click.ClickException("; ".join(error.message for error in result.errors))
            click.echo(f"{result.document_count} documents, {len(data)} bytes")
            return
        dumper.dump(data, sys.stdout)
    except ProcessingError as e:
        response = dumper.error_handler.handle_processing_error(e)
        if verbose:
            click.echo(f"Hint: {response.suggested_action}", err=True)
        raise click.ClickException(str(e)) from e


if __name__ == '__main__':
    main()
