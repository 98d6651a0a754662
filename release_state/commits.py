# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import logging

import git
import git.exc

import gitutil
import release_state.diagnostics as rsd
import release_state.errors as rse
import release_state.model as rsm

logger = logging.getLogger(__name__)


class _CommitCollector:
    '''
    accumulates commits (keyed by hexsha) reachable from HEAD, excluding commits reachable from
    the boundary-commit.

    Loaded commits are kept so that commits reached via more than one path are read from
    object-store only once.
    '''
    def __init__(
        self,
        repo: git.Repo,
        excluded: set[str],
        emit,
    ):
        self.repo = repo
        self.excluded = excluded
        self.emit = emit
        self.commits: dict[str, rsm.Commit] = {}
        self._loaded: dict[str, git.Commit] = {}

    def load(self, hexsha: str) -> git.Commit:
        if (commit := self._loaded.get(hexsha)) is not None:
            return commit

        commit = gitutil.read_commit(repo=self.repo, hexsha=hexsha)
        self._loaded[hexsha] = commit
        return commit

    def record(self, commit: git.Commit):
        if commit.hexsha in self.commits:
            return

        self.emit(
            logging.DEBUG,
            'commit',
            f'Found commit with hash {commit.hexsha}',
            commit=commit.hexsha,
        )
        self.commits[commit.hexsha] = rsm.Commit.from_git_commit(commit)

    def expand_merged_parents(self, merge_commit: git.Commit):
        '''
        records the commits of branches merged by `merge_commit`, i.e. all commits reachable from
        its second (and any further) parents. Paths end at root-commits, at excluded commits, or at
        commits that cannot be read (e.g. due to shallow clones).
        '''
        stack = [p.hexsha for p in reversed(merge_commit.parents[1:])]

        while stack:
            hexsha = stack.pop()
            if hexsha in self.commits or hexsha in self.excluded:
                continue

            try:
                commit = self.load(hexsha)
            except gitutil.UNREADABLE_OBJECT_ERRORS as e:
                self.emit(
                    logging.DEBUG,
                    'parent-unreadable',
                    f'Could not read commit {hexsha} (merged by {merge_commit.hexsha}), skip: {e}',
                    commit=hexsha,
                    merge_commit=merge_commit.hexsha,
                )
                continue

            self.record(commit)
            # first parent is visited first (newest first along merged branch)
            stack.extend(p.hexsha for p in reversed(commit.parents))


def _excluded_hexshas(
    repo: git.Repo,
    boundary_hash: str,
) -> set[str]:
    if not boundary_hash:
        return set()

    try:
        return gitutil.ancestor_hexshas(repo=repo, hexsha=boundary_hash)
    except git.exc.GitCommandError as e:
        raise rse.CommitHistoryReadError(
            f'boundary commit {boundary_hash} is not contained in repository'
        ) from e


def collect_commits(
    repo: git.Repo,
    boundary_hash: str='',
    diagnostics: rsd.Sink | None=None,
) -> tuple[rsm.Commit, ...]:
    '''
    returns all commits reachable from HEAD that are neither the commit identified by
    `boundary_hash`, nor any of its ancestors. Each commit is contained exactly once.

    If `boundary_hash` is empty, all commits reachable from HEAD are returned (in shallow clones,
    this is limited to the commits that were actually fetched).

    Commits along HEAD's first-parent chain are returned newest first. Commits from merged branches
    follow the merge-commit that merged them. Callers requiring a strict order must sort on their
    own.

    raises `CommitHistoryReadError` if commit-history cannot be read (e.g. if the boundary-commit
    is missing due to a shallow clone)
    raises ValueError if `boundary_hash` is neither empty nor a commit-hash
    '''
    emit = rsd.emitter(diagnostics, logger)

    try:
        head = gitutil.head_commit(repo)
    except ValueError as e:
        raise rse.CommitHistoryReadError(f'HEAD does not point to a commit: {e}') from e

    excluded = _excluded_hexshas(repo=repo, boundary_hash=boundary_hash)
    collector = _CommitCollector(repo=repo, excluded=excluded, emit=emit)

    hexsha = head.hexsha
    while hexsha:
        if hexsha in excluded:
            emit(
                logging.DEBUG,
                'boundary-reached',
                f'Found commit with hash {hexsha}, will stop here',
                commit=hexsha,
            )
            break

        try:
            commit = collector.load(hexsha)
        except gitutil.UNREADABLE_OBJECT_ERRORS as e:
            if boundary_hash:
                raise rse.CommitHistoryReadError(
                    f'could not read commit {hexsha} before reaching {boundary_hash}'
                ) from e
            # no boundary: we reached the end of a shallow clone
            emit(
                logging.DEBUG,
                'history-truncated',
                f'Could not read commit {hexsha}, will stop here: {e}',
                commit=hexsha,
            )
            break

        collector.record(commit)

        if len(commit.parents) > 1:
            collector.expand_merged_parents(merge_commit=commit)

        if commit.parents:
            hexsha = commit.parents[0].hexsha
        else:
            hexsha = None

    emit(
        logging.DEBUG,
        'commits-collected',
        f'Found {len(collector.commits)} commits till last release',
        count=len(collector.commits),
    )
    return tuple(collector.commits.values())
