"""
Handles the 'libraries' command: list library and reference repositories.
"""

import click

from ..cli_utils import standard_command, add_common_options, get_mirror, wants_table
from ..render import render_libraries_table


@click.command('libraries')
@click.option('-c', '--category', type=click.Choice(['libraries', 'reference']),
              help='Only this category (default: both)')
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def libraries_handler(category, table, progress, **kwargs):
    """List Noir libraries with their clone status."""
    libraries = get_mirror().libraries(category)

    if wants_table(table):
        render_libraries_table(libraries)
        return None
    return [lib.to_dict() for lib in libraries]
