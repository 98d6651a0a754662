# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


class ReleaseStateError(RuntimeError):
    pass


class RepositoryOpenError(ReleaseStateError):
    '''
    raised if the given path does not point to a (readable) git-repository
    '''
    pass


class NoBranchFound(ReleaseStateError):
    '''
    raised if HEAD cannot be read, or if HEAD is detached and there is no local branch to fall
    back to.
    '''
    def __init__(self, head_ref_name: str):
        self.head_ref_name = head_ref_name
        super().__init__(
            f'no branch found, found {head_ref_name}, please checkout a branch '
            '(git checkout -b <BRANCH>)'
        )


class RepositoryReadError(ReleaseStateError):
    pass


class CommitHistoryReadError(ReleaseStateError):
    '''
    raised if commit-history could not be read. Most commonly this is caused by a shallow clone
    which does not contain the commit of the last release.
    '''
    hint = 'could not read commits, check git clone depth in your ci'

    def __init__(self, msg: str):
        super().__init__(f'{msg} ({self.hint})')
