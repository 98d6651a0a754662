#! /usr/bin/env python3
import argparse
import json
import logging
import sys

import yaml

import release_state.config as rsc
import release_state.errors as rse
import release_state.log
import release_state.model as rsm
import release_state.resolve

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """ Parses CLI for release-state resolution """
    parser = argparse.ArgumentParser(
        description='Print current branch, last released version and commits since that version'
    )
    parser.add_argument(
        '--repository', '-r',
        default='.',
        help='path to git-repository (defaults to current working directory)',
    )
    parser.add_argument(
        '--config', '-c',
        default=None,
        help=f'path to cfg-file (defaults to {rsc.CFG_FILE_NAME} in repository)',
    )
    parser.add_argument(
        '--branch-selection',
        choices=[s.value for s in rsm.BranchSelection],
        default=None,
        help='which local branch to report if HEAD is detached',
    )
    parser.add_argument(
        '--format', '-f',
        choices=('yaml', 'json'),
        default='yaml',
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('--verbose', '-v', action='store_true')
    verbosity.add_argument('--quiet', '-q', action='store_true')

    return parser.parse_args(argv)


def _cfg_from_args(args: argparse.Namespace) -> rsc.ResolverCfg:
    if args.verbose:
        log_level = 'DEBUG'
    elif args.quiet:
        log_level = 'WARNING'
    else:
        log_level = None

    if args.branch_selection:
        branch_selection = rsm.BranchSelection(args.branch_selection)
    else:
        branch_selection = None

    return rsc.ResolverCfg(
        branch_selection=branch_selection,
        log_level=log_level,
    )


def _dump(state: rsm.ReleaseState, fmt: str) -> str:
    raw = state.as_dict()
    if fmt == 'json':
        return json.dumps(raw, indent=2) + '\n'
    return yaml.safe_dump(raw, sort_keys=False)


def resolve_cli(argv=None):
    """CLI wrapper for release-state resolution"""

    args = parse_args(argv)

    try:
        cfg = rsc.load_cfg(
            repo_path=args.repository,
            cfg_file=args.config,
            overrides=_cfg_from_args(args),
        )
    except ValueError as e:
        print(f'invalid configuration: {e}', file=sys.stderr)
        sys.exit(1)

    release_state.log.configure_default_logging(
        level=getattr(logging, cfg.log_level or 'INFO'),
    )

    try:
        state = release_state.resolve.resolve(
            repo_path=args.repository,
            cfg=cfg,
        )
    except rse.ReleaseStateError as e:
        print(f'✗ {e}', file=sys.stderr)
        sys.exit(1)

    logger.debug(f'Found {len(state.commits)} commits till last release')
    print(_dump(state=state, fmt=args.format), end='')
    sys.exit(0)


if __name__ == '__main__':
    resolve_cli()
