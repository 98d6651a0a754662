# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import logging

import git
import git.exc

import release_state.diagnostics as rsd
import release_state.errors as rse
import release_state.model as rsm

logger = logging.getLogger(__name__)

# never considered a branch-name (defensive against odd ref-naming in ci-checkouts)
_EXCLUDED_BRANCH_NAMES = ('origin',)


def _head_ref_name(repo: git.Repo) -> str:
    if repo.head.is_detached:
        return repo.head.path # `HEAD`
    try:
        return repo.head.reference.path
    except (TypeError, ValueError):
        return repo.head.path


def _local_branch_names(repo: git.Repo) -> list[str]:
    try:
        return [head.name for head in repo.branches]
    except (OSError, git.exc.GitError) as e:
        raise rse.RepositoryReadError(f'failed to enumerate branches: {e}') from e


def resolve_branch(
    repo: git.Repo,
    selection: rsm.BranchSelection=rsm.BranchSelection.FIRST_FOUND,
    diagnostics: rsd.Sink | None=None,
) -> str:
    '''
    returns the (short) name of the branch that is currently checked out.

    If HEAD is detached (as is common for checkouts done by ci-systems), the name of a local
    branch is returned instead. Which branch is chosen (if there is more than one local branch)
    depends on `selection`.

    raises `NoBranchFound` if HEAD cannot be read, or if HEAD is detached and there is no local
    branch to fall back to
    '''
    emit = rsd.emitter(diagnostics, logger)

    if not repo.head.is_valid():
        raise rse.NoBranchFound(head_ref_name=_head_ref_name(repo))

    if not repo.head.is_detached:
        branch_name = repo.head.reference.name
        emit(logging.DEBUG, 'branch-found', f'Found branch {branch_name}', branch=branch_name)
        return branch_name

    candidates = [
        name for name in _local_branch_names(repo)
        if name not in _EXCLUDED_BRANCH_NAMES
    ]
    if selection is rsm.BranchSelection.SORTED:
        candidates = sorted(candidates)

    if not candidates:
        raise rse.NoBranchFound(head_ref_name=_head_ref_name(repo))

    branch_name = candidates[0]
    emit(
        logging.DEBUG,
        'branch-found-detached',
        f'Found branch from HEAD {branch_name}',
        branch=branch_name,
        candidates=len(candidates),
    )
    return branch_name
