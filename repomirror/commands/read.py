"""
Handles the 'read' command: print a mirrored file or an example circuit.
"""

import click

from ..cli_utils import get_mirror
from ..exit_codes import DATA_ERROR, NO_REPOS_FOUND, exit_with_code


@click.command('read')
@click.argument('path')
@click.option('-e', '--example', is_flag=True, help='Treat PATH as an example name')
def read_handler(path, example):
    """Print a file from the mirror.

    PATH is relative to the mirror root, e.g. noir/noir_stdlib/src/hash/mod.nr.
    With --example, PATH is an example name from 'repomirror examples'.
    """
    mirror = get_mirror()

    if example:
        found = mirror.find_example(path)
        if not found:
            exit_with_code(NO_REPOS_FOUND, f"Example '{path}' not found")
        path = found.path

    content = mirror.read_file(path)
    if content is None:
        exit_with_code(DATA_ERROR, f"File not found: {path}")
    click.echo(content, nl=False)
