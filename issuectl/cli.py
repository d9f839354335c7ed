#!/usr/bin/env python3
"""issuectl CLI entrypoint."""

import argparse
import logging
import sys
from pathlib import Path

from issuectl import __version__
from issuectl.lib.config import load_config
from issuectl.commands import archive as cmd_archive_module
from issuectl.commands import list as cmd_list_module
from issuectl.commands import new as cmd_new_module
from issuectl.commands import refine as cmd_refine_module
from issuectl.commands import show as cmd_show_module
from issuectl.commands import solve as cmd_solve_module
from issuectl.commands import status as cmd_status_module

logger = logging.getLogger(__name__)


def get_config(args):
    """Load store config for --directory (default: cwd). Exits 2 on a bad issues.env."""
    base_dir = Path(args.directory).resolve() if args.directory else Path.cwd()
    try:
        return load_config(base_dir)
    except ValueError as e:
        print(f"ERROR: Invalid configuration: {e}")
        sys.exit(2)


def cmd_list_open(args):
    return cmd_list_module.cmd_list_open(args, get_config(args))


def cmd_list_solved(args):
    return cmd_list_module.cmd_list_solved(args, get_config(args))


def cmd_new(args):
    return cmd_new_module.cmd_new(args, get_config(args))


def cmd_show(args):
    return cmd_show_module.cmd_show(args, get_config(args))


def cmd_archive(args):
    return cmd_archive_module.cmd_archive(args, get_config(args))


def cmd_restore(args):
    return cmd_archive_module.cmd_restore(args, get_config(args))


def cmd_resolve(args):
    return cmd_status_module.cmd_resolve(args, get_config(args))


def cmd_reject(args):
    return cmd_status_module.cmd_reject(args, get_config(args))


def cmd_reopen(args):
    return cmd_status_module.cmd_reopen(args, get_config(args))


def cmd_refine(args):
    return cmd_refine_module.cmd_refine(args, get_config(args))


def cmd_solve_unsolved(args):
    return cmd_solve_module.cmd_solve_unsolved(args, get_config(args))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='issues', description='File-based issue store')
    parser.add_argument('--directory', '-C', help='Directory holding issues/ and archive/ (default: cwd)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Show debug logging')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # issues list-open
    p_list_open = subparsers.add_parser('list-open', help='List active issues')
    p_list_open.add_argument('--long', '-l', action='store_true', help='Show status and stage')
    p_list_open.add_argument('--json', action='store_true', help='Print JSON summaries')
    p_list_open.set_defaults(func=cmd_list_open)

    # issues list-solved
    p_list_solved = subparsers.add_parser('list-solved', help='List archived issues')
    p_list_solved.add_argument('--long', '-l', action='store_true', help='Show status and stage')
    p_list_solved.add_argument('--json', action='store_true', help='Print JSON summaries')
    p_list_solved.set_defaults(func=cmd_list_solved)

    # issues new
    p_new = subparsers.add_parser('new', help='Create an issue')
    p_new.add_argument('name', help='Issue name (kebab-case)')
    p_new.add_argument('--title', '-t', help='Title for problem.md (default: derived from name)')
    p_new.add_argument('--description', '-d', help='Problem description')
    p_new.set_defaults(func=cmd_new)

    # issues show
    p_show = subparsers.add_parser('show', help='Show issue status and artifacts')
    p_show.add_argument('name', help='Issue name')
    p_show.set_defaults(func=cmd_show)

    # issues archive
    p_archive = subparsers.add_parser('archive', help='Move an issue to the archive')
    p_archive.add_argument('name', help='Issue name')
    status_group = p_archive.add_mutually_exclusive_group()
    status_group.add_argument('--resolve', action='store_true', help='Mark RESOLVED before archiving')
    status_group.add_argument('--reject', action='store_true', help='Mark REJECTED before archiving')
    p_archive.set_defaults(func=cmd_archive)

    # issues restore
    p_restore = subparsers.add_parser('restore', help='Move an archived issue back and reopen it')
    p_restore.add_argument('name', help='Archived issue name')
    p_restore.set_defaults(func=cmd_restore)

    # issues resolve / reject / reopen
    p_resolve = subparsers.add_parser('resolve', help='Mark an issue RESOLVED')
    p_resolve.add_argument('name', help='Issue name')
    p_resolve.set_defaults(func=cmd_resolve)

    p_reject = subparsers.add_parser('reject', help='Mark an issue REJECTED')
    p_reject.add_argument('name', help='Issue name')
    p_reject.set_defaults(func=cmd_reject)

    p_reopen = subparsers.add_parser('reopen', help='Mark a resolved or rejected issue OPEN')
    p_reopen.add_argument('name', help='Issue name')
    p_reopen.set_defaults(func=cmd_reopen)

    # issues refine
    p_refine = subparsers.add_parser('refine', help="Have the agent rewrite an issue's problem.md")
    p_refine.add_argument('name', help='Issue name')
    p_refine.add_argument('--guidance', '-g', help='Extra instructions for the agent')
    p_refine.set_defaults(func=cmd_refine)

    # issues solve-unsolved
    p_solve = subparsers.add_parser('solve-unsolved', help='Run the solve workflow on every unsolved issue')
    p_solve.add_argument('workflow', nargs='?', help='Workflow name, e.g. go-k8s (default: ISSUES_WORKFLOW)')
    p_solve.add_argument('--dry-run', '-n', action='store_true', help='List unsolved issues only')
    p_solve.add_argument('--fail-fast', action='store_true', help='Stop at the first failed issue')
    p_solve.set_defaults(func=cmd_solve_unsolved)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    return args.func(args)


def _run_subcommand(command: str) -> int:
    return main([command, *sys.argv[1:]])


def list_open_main():
    return _run_subcommand('list-open')


def list_solved_main():
    return _run_subcommand('list-solved')


def archive_main():
    return _run_subcommand('archive')


def refine_main():
    return _run_subcommand('refine')


def solve_unsolved_main():
    return _run_subcommand('solve-unsolved')


if __name__ == '__main__':
    sys.exit(main())
