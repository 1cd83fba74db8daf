"""CLI command for recursive search-and-replace."""

import json
import logging
import sys

import click

from replacer.__version__ import __version__
from replacer.cancellation import CancellationToken, handle_signals
from replacer.config import get_log_level, get_no_color, get_timeout_seconds, mb_to_bytes
from replacer.dispatcher import Replacer
from replacer.models import RunReport
from replacer.utils import human_readable_size, parse_duration, setup_logging


logger = logging.getLogger(__name__)

USAGE = 'Usage: replacer <search> <replace> <path>'


def _parse_timeout(ctx, param, value: str | None) -> float:
    """Convert --timeout to seconds, falling back to REPLACER_TIMEOUT."""
    if value is None:
        return get_timeout_seconds()
    try:
        return parse_duration(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


# Search and replace strings may start with '-'. No short options are defined,
# so any single-dash word is passed through as a positional argument.
@click.command('replacer', context_settings={'ignore_unknown_options': True})
@click.argument('args', nargs=-1, type=click.UNPROCESSED, metavar='<search> <replace> <path>')
@click.option(
    '--timeout',
    callback=_parse_timeout,
    default=None,
    help='Bound on total run time, e.g. 30s, 3m, 1h30m (default: 3m or REPLACER_TIMEOUT)',
)
@click.option('--workers', type=int, default=None, help='Workers per pool (default: number of CPUs)')
@click.option(
    '--threshold-mb',
    type=click.IntRange(min=0),
    default=None,
    help='Files larger than this (MiB) are streamed line by line (default: 2048)',
)
@click.option('--json', 'json_output', is_flag=True, help='Output report in JSON format')
@click.option('--no-color', is_flag=True, help='Disable colored output')
@click.option('--verbose', is_flag=True, help='Log every walked and processed file')
@click.version_option(version=__version__, prog_name='replacer')
def replace_command(
    args: tuple[str, ...],
    timeout: float,
    workers: int | None,
    threshold_mb: int | None,
    json_output: bool,
    no_color: bool,
    verbose: bool,
):
    """Replace every occurrence of SEARCH with REPLACE in all files under PATH.

    Matching is literal (no regex). Files up to the threshold are rewritten
    in memory, larger files are streamed line by line. Every file is replaced
    atomically through a temporary file in the same directory.

    \b
    Examples:
        replacer foo bar ./src
        replacer "old name" "new name" /srv/docs --timeout 10m
        replacer http:// https:// . --json
        replacer -O2 -O3 ./Makefiles
        replacer -- --json --yaml .

    \b
    Exit status:
        0 when every file was processed, 1 when any error was collected
    """
    if len(args) != 3:
        click.echo(USAGE)
        return

    search, replace, root = args

    setup_logging('DEBUG' if verbose else get_log_level())

    threshold = mb_to_bytes(threshold_mb) if threshold_mb is not None else None
    replacer = Replacer(search, replace, workers=workers, threshold=threshold)

    logger.info(
        f'Replacing {search!r} with {replace!r} under {root} '
        f'(timeout {timeout:.0f}s, threshold {human_readable_size(replacer.threshold)})'
    )

    token = CancellationToken(timeout=timeout)
    with handle_signals(token):
        report = replacer.run(root, token)

    if json_output:
        _output_json(report)
    else:
        colorize = not no_color and not get_no_color() and sys.stdout.isatty()
        click.echo(report.to_cli(colorize=colorize))

    if report.errors:
        sys.exit(1)


def _output_json(report: RunReport) -> None:
    """Output run report as JSON."""
    click.echo(json.dumps(report.model_dump(), indent=2))
