"""
MCP server command.

Starts the repomirror MCP (Model Context Protocol) server so LLM tools
can sync and search the Noir mirror.
"""

import logging

import click

from ..cli_utils import get_mirror

logger = logging.getLogger(__name__)


@click.command('mcp')
@click.option('--transport', '-t', default='stdio',
              type=click.Choice(['stdio', 'http']),
              help='Transport type (stdio for MCP clients, http for testing)')
@click.option('--port', '-p', default=8765, type=int,
              help='Port for HTTP transport (default: 8765)')
@click.option('--debug', is_flag=True, help='Enable debug logging')
def mcp_handler(transport, port, debug):
    """Start the repomirror MCP server.

    \b
    Tools:
      noir_sync_repos      - Clone or update repositories
      noir_status          - Clone state of every repository
      noir_search_code     - Search Noir source code
      noir_search_docs     - Search the documentation
      noir_search_stdlib   - Search the standard library
      noir_list_examples   - List example circuits
      noir_read_example    - Read an example circuit
      noir_read_file       - Read any mirrored file
      noir_list_libraries  - List library repositories

    \b
    Examples:
      repomirror mcp                    # Start stdio server
      repomirror mcp --transport http   # Start HTTP server (for testing)
    """
    if debug:
        logging.getLogger('repomirror').setLevel(logging.DEBUG)

    from ..mcp import run_mcp_server

    if transport == 'http':
        click.echo(f"Starting repomirror MCP server on http://localhost:{port}", err=True)
        click.echo("Press Ctrl+C to stop", err=True)

    run_mcp_server(transport=transport, port=port, mirror=get_mirror())
