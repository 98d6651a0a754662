# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import logging
import re

import git
import git.exc

import release_state.errors as rse

logger = logging.getLogger(__name__)

# full (sha1 or sha256) or abbreviated commit-hashes
HEXSHA_PATTERN = re.compile(r'[0-9a-fA-F]{4,64}')

# errors raised by GitPython if an object is absent from (or cannot be read from) object-store
# note: missing objects are reported as ValueError by the git-cmd object-db
UNREADABLE_OBJECT_ERRORS = (
    ValueError,
    git.exc.ODBError,
    git.exc.GitError,
)


def open_repository(path: str) -> git.Repo:
    '''
    opens the git-repository at the given path (parent directories are not searched).

    raises `RepositoryOpenError` if path does not exist, or is not a git-repository
    '''
    if path is None:
        raise ValueError(path)

    try:
        repo = git.Repo(path)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
        raise rse.RepositoryOpenError(f'not a git-repository: {path}') from e

    logger.debug(f'opened repository at {repo.git_dir=}')
    return repo


def read_commit(repo: git.Repo, hexsha: str) -> git.Commit:
    '''
    reads the commit with the given hexsha from object-store, eagerly reading its contents (GitPython
    will read objects lazily by default, which would defer errors to attribute-access).

    raises one of `UNREADABLE_OBJECT_ERRORS` if the commit is absent or cannot be read (which is
    expected for parents of the oldest commits in a shallow clone)
    '''
    commit = git.Commit(repo=repo, binsha=bytes.fromhex(hexsha))
    # accessing any attribute will trigger reading object-contents
    commit.committer
    return commit


def head_commit(repo: git.Repo) -> git.Commit:
    '''
    returns the commit HEAD points to

    raises ValueError if HEAD does not point to a commit (e.g. for empty repositories)
    '''
    return repo.head.commit


def ancestor_hexshas(repo: git.Repo, hexsha: str) -> set[str]:
    '''
    returns hexshas of all commits reachable from the commit with the given (possibly abbreviated)
    hexsha, including that commit itself. Honours shallow-boundaries.

    raises ValueError if `hexsha` is not a hexsha (anything else would be passed to `git rev-list`
    as revision or option)
    raises `git.exc.GitCommandError` if hexsha cannot be resolved
    '''
    if not HEXSHA_PATTERN.fullmatch(hexsha):
        raise ValueError(f'not a commit-hash: {hexsha!r}')

    return set(repo.git.rev_list(hexsha).split())
