#!/usr/bin/env python3

import click

from repomirror import __version__
from repomirror.config import configure_logging
from repomirror.commands.sync import sync_handler
from repomirror.commands.status import status_handler
from repomirror.commands.search import search_handler, docs_handler, stdlib_handler
from repomirror.commands.examples import examples_handler
from repomirror.commands.libraries import libraries_handler
from repomirror.commands.read import read_handler
from repomirror.commands.mcp import mcp_handler


@click.group()
@click.version_option(version=__version__)
@click.option('--repos-dir', type=click.Path(file_okay=False),
              help='Mirror root (default: $NOIR_MCP_REPOS_DIR/repos or ~/.noir-mcp/repos)')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level (default: from config)')
@click.pass_context
def cli(ctx, repos_dir, log_level):
    """repomirror - Local mirror of the Noir ecosystem for search and LLM tools.

    Clones the Noir compiler, docs, stdlib, examples and community libraries
    at pinned versions, and searches them with ripgrep or a built-in scanner.
    """
    configure_logging(level=log_level)
    ctx.ensure_object(dict)
    ctx.obj['repos_dir'] = repos_dir


cli.add_command(sync_handler, name='sync')
cli.add_command(status_handler, name='status')
cli.add_command(search_handler, name='search')
cli.add_command(docs_handler, name='docs')
cli.add_command(stdlib_handler, name='stdlib')
cli.add_command(examples_handler, name='examples')
cli.add_command(libraries_handler, name='libraries')
cli.add_command(read_handler, name='read')
cli.add_command(mcp_handler, name='mcp')


def main():
    cli()

if __name__ == "__main__":
    main()
