"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import os
import sys
from functools import wraps
from typing import Any, Dict, Iterable, Iterator

import click
import yaml

from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .progress import get_progress

FORMAT_ENV = "REPOMIRROR_FORMAT"
FORMATS = ('jsonl', 'json', 'yaml')


def get_format_from_env(default: str = 'jsonl') -> str:
    fmt = os.environ.get(FORMAT_ENV, default).lower()
    return fmt if fmt in FORMATS else default


def format_output(data: Iterable[Dict[str, Any]], output_format: str) -> Iterator[str]:
    """
    Format data according to the specified format.

    Args:
        data: Dictionaries to format
        output_format: jsonl (one object per line), json (one array) or yaml

    Yields:
        Formatted strings for output
    """
    if output_format == "jsonl":
        for item in data:
            yield json.dumps(item, ensure_ascii=False)
    elif output_format == "json":
        yield json.dumps(list(data), ensure_ascii=False, indent=2)
    elif output_format == "yaml":
        yield yaml.safe_dump(list(data), default_flow_style=False, allow_unicode=True, sort_keys=False)
    else:
        raise ValueError(f"Unknown format: {output_format}")


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Progress reporting on stderr
    - Clean JSONL (or json/yaml) output on stdout
    - --quiet suppresses data output
    - Consistent error handling and exit codes

    The command returns a dict, a list or a generator of dicts to be
    printed, or None when it rendered its own (table) output.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        verbose = kwargs.get('verbose', False)
        quiet = kwargs.get('quiet', False)
        output_format = kwargs.get('format') or get_format_from_env('jsonl')

        progress = get_progress(enabled=verbose or None)
        kwargs['progress'] = progress

        try:
            result = func(*args, **kwargs)

            if isinstance(result, dict):
                result = [result]

            if result is None:
                pass
            elif quiet:
                # Consume generators so their side effects still happen
                for _ in result:
                    pass
            else:
                for line in format_output(result, output_format):
                    click.echo(line)

            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            progress.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except CommandError as e:
            progress.error(str(e))
            if not quiet:
                error_obj = {
                    "error": str(e),
                    "type": type(e).__name__,
                    "exit_code": e.exit_code
                }
                if hasattr(e, 'succeeded'):
                    error_obj['succeeded'] = e.succeeded
                    error_obj['failed'] = e.failed
                click.echo(json.dumps(error_obj, ensure_ascii=False))
            sys.exit(e.exit_code)
        except Exception as e:
            progress.error(f"Command failed: {e}")
            if not quiet:
                error_obj = {
                    "error": str(e),
                    "type": type(e).__name__
                }
                click.echo(json.dumps(error_obj, ensure_ascii=False))
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


def wants_table(table) -> bool:
    """Resolve --table/--no-table; unset means table output on a terminal."""
    if table is None:
        return sys.stdout.isatty()
    return table


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                            help='Force progress output even when piped'),
    'quiet': click.option('-q', '--quiet', is_flag=True,
                          help='Suppress data output, show only progress'),
    'format': click.option('-f', '--format',
                           type=click.Choice(FORMATS),
                           help=f'Output format (default: jsonl, or from {FORMAT_ENV} env)'),
    'table': click.option('--table/--no-table', default=None,
                          help='Display as formatted table (auto-detected by default)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'quiet')
        def my_command(verbose, quiet):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator


def get_mirror():
    """Build the RepoMirror for the current command, honoring --repos-dir."""
    from .api import RepoMirror

    ctx = click.get_current_context(silent=True)
    obj = (ctx.find_root().obj if ctx else None) or {}
    return RepoMirror(root=obj.get('repos_dir'))
