"""
Handles the search commands: 'search' (code), 'docs' and 'stdlib'.

Results are JSONL lines of {file, line, content, repo}. ripgrep is used
when available; otherwise the mirror is scanned in-process.
"""

import click

from ..catalog import NOIR_REPO
from ..cli_utils import standard_command, add_common_options, get_mirror, wants_table
from ..exit_codes import NoReposFoundError
from ..render import render_search_results


def _output(results, table):
    if wants_table(table):
        render_search_results(results)
        return None
    return [r.to_dict() for r in results]


def _require_noir(mirror):
    if not mirror.is_cloned(NOIR_REPO):
        raise NoReposFoundError(f"{NOIR_REPO} repo is not cloned. Run 'repomirror sync' first.")


@click.command('search')
@click.argument('query')
@click.option('-g', '--glob', 'file_pattern', default='*.nr', show_default=True,
              help='File glob, e.g. "*.{nr,rs}"')
@click.option('-r', '--repo', help='Repository (or repo/subpath) to search')
@click.option('-n', '--max-results', type=int, default=30, show_default=True)
@click.option('-s', '--case-sensitive', is_flag=True, help='Match case exactly')
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def search_handler(query, file_pattern, repo, max_results, case_sensitive, table, progress, **kwargs):
    """Search Noir source code across cloned repositories.

    QUERY is a regular expression; invalid patterns match literally.
    """
    mirror = get_mirror()
    if repo and not mirror.is_cloned(repo.split('/')[0]):
        raise NoReposFoundError(f"Repository '{repo}' is not cloned. Run 'repomirror sync' first.")
    if not mirror.any_cloned():
        raise NoReposFoundError("No repositories are cloned. Run 'repomirror sync' first.")

    results = mirror.search(query, file_pattern=file_pattern, repo=repo,
                            max_results=max_results, case_sensitive=case_sensitive)
    progress(f"Found {len(results)} matches")
    return _output(results, table)


@click.command('docs')
@click.argument('query')
@click.option('--section', help='Docs section to search within (e.g. "noir", "tooling")')
@click.option('-n', '--max-results', type=int, default=20, show_default=True)
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def docs_handler(query, section, max_results, table, progress, **kwargs):
    """Search the Noir documentation."""
    mirror = get_mirror()
    _require_noir(mirror)
    return _output(mirror.search_docs(query, section=section, max_results=max_results), table)


@click.command('stdlib')
@click.argument('query')
@click.option('-n', '--max-results', type=int, default=30, show_default=True)
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def stdlib_handler(query, max_results, table, progress, **kwargs):
    """Search the Noir standard library."""
    mirror = get_mirror()
    _require_noir(mirror)
    return _output(mirror.search_stdlib(query, max_results=max_results), table)
