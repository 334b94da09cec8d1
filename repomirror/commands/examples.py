"""
Handles the 'examples' command: list example circuits.
"""

import click

from ..cli_utils import standard_command, add_common_options, get_mirror, wants_table
from ..render import render_examples_table


@click.command('examples')
@click.argument('category', required=False)
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def examples_handler(category, table, progress, **kwargs):
    """List example circuits, optionally filtered by name or path substring."""
    examples = get_mirror().examples(category)

    if wants_table(table):
        render_examples_table(examples)
        return None
    return [e.to_dict() for e in examples]
