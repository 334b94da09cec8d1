"""
Handles the 'sync' command: clone or update the mirrored repositories.

Default output is one JSONL line per repository followed by a summary
line. Exit code is 0 when every repository synced, 71 (partial success)
when some failed and 64 when nothing was selected.
"""

import click

from ..catalog import get_category_names
from ..cli_utils import standard_command, add_common_options, get_mirror, wants_table
from ..exit_codes import NoReposFoundError, PartialSuccessError
from ..render import render_sync_summary


def _report(summary, progress):
    for outcome in summary.outcomes:
        if outcome.ok:
            progress.success(outcome.status)
        else:
            progress.warning(f"{outcome.name}: {outcome.status}")


def _check(summary):
    if not summary.outcomes:
        raise NoReposFoundError(summary.message)
    if not summary.success:
        raise PartialSuccessError(summary.message, succeeded=summary.successful, failed=summary.failed)


@click.command('sync')
@click.option('--version', 'noir_version', help='Noir tag for the noir repo (default: NOIR_DEFAULT_VERSION)')
@click.option('--force', is_flag=True, help='Delete and re-clone even if the mirror matches')
@click.option('--repo', 'repos', multiple=True, help='Repository to sync by name (repeatable)')
@click.option('-c', '--category', 'categories', multiple=True,
              type=click.Choice(get_category_names()),
              help='Category to sync (repeatable; default: core)')
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def sync_handler(noir_version, force, repos, categories, table, progress, **kwargs):
    """Clone or update Noir repositories.

    \b
    Examples:
        repomirror sync                          # core repos
        repomirror sync -c libraries -c reference
        repomirror sync --repo noir-bignum
        repomirror sync --version v1.0.0-beta.3 --force
    """
    mirror = get_mirror()
    progress(f"Syncing into {mirror.root}...")

    summary = mirror.sync(version=noir_version, force=force, repos=repos, categories=categories)
    _report(summary, progress)

    if wants_table(table):
        render_sync_summary(summary)
        _check(summary)
        return None

    def results():
        for outcome in summary.outcomes:
            yield outcome.to_dict()
        summary_dict = summary.to_dict()
        summary_dict.pop('repos')
        yield summary_dict
        _check(summary)

    return results()
