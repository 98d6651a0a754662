# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import dataclasses
import enum

import git
import semver


class BranchSelection(enum.StrEnum):
    '''
    policy for picking a branch name if HEAD is detached

    FIRST_FOUND: first local branch in ref-enumeration order
    SORTED: lexicographically smallest local branch name
    '''
    FIRST_FOUND = 'first-found'
    SORTED = 'sorted'


@dataclasses.dataclass(frozen=True)
class Commit:
    hash: str
    message: str
    author: str # committer's name (reflects integration-event, as opposed to authorship)

    @staticmethod
    def from_git_commit(commit: git.Commit) -> 'Commit':
        return Commit(
            hash=commit.hexsha,
            message=commit.message,
            author=commit.committer.name,
        )


@dataclasses.dataclass(frozen=True)
class VersionTag:
    version: semver.VersionInfo
    tag_name: str
    commit_hash: str

    def as_dict(self) -> dict:
        return {
            'version': str(self.version),
            'tag_name': self.tag_name,
            'commit_hash': self.commit_hash,
        }


@dataclasses.dataclass(frozen=True)
class ReleaseState:
    branch: str
    head_hash: str
    last_version: VersionTag | None
    commits: tuple[Commit, ...]

    @property
    def boundary_hash(self) -> str:
        if not self.last_version:
            return ''
        return self.last_version.commit_hash

    def as_dict(self) -> dict:
        if self.last_version:
            last_version = self.last_version.as_dict()
        else:
            last_version = None

        return {
            'branch': self.branch,
            'head_hash': self.head_hash,
            'last_version': last_version,
            'commits': [dataclasses.asdict(c) for c in self.commits],
        }
