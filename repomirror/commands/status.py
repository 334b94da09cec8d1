"""
Handles the 'status' command: clone state of every configured repository.
"""

import click

from ..cli_utils import standard_command, add_common_options, get_mirror, wants_table
from ..render import render_status_table


@click.command('status')
@click.option('--cloned', 'only_cloned', is_flag=True, help='Only show cloned repositories')
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def status_handler(only_cloned, table, progress, **kwargs):
    """Show which repositories are cloned and at which commit."""
    status = get_mirror().status()
    if only_cloned:
        status['repos'] = [r for r in status['repos'] if r['cloned']]

    if wants_table(table):
        render_status_table(status)
        return None

    return [dict(r, repos_dir=status['repos_dir']) for r in status['repos']]
