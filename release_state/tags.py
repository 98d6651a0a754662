# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import logging

import git
import git.exc
import semver

import gitutil
import release_state.diagnostics as rsd
import release_state.errors as rse
import release_state.model as rsm
import version as version_util

logger = logging.getLogger(__name__)


def _version_tags(
    repo: git.Repo,
    emit,
) -> list[tuple[semver.VersionInfo, git.TagReference]]:
    try:
        tags = list(repo.tags)
    except (OSError, git.exc.GitError) as e:
        raise rse.RepositoryReadError(f'failed to enumerate tags: {e}') from e

    candidates = []
    for tag in tags:
        emit(logging.DEBUG, 'tag', f'Found tag {tag.path}', tag=tag.name)
        parsed = version_util.parse_to_semver(tag.name, invalid_semver_ok=True)
        if parsed is None:
            emit(
                logging.DEBUG,
                'tag-skipped',
                f'Tag {tag.name} is not a valid version, skip',
                tag=tag.name,
            )
            continue
        candidates.append((parsed, tag))

    return candidates


def find_last_version(
    repo: git.Repo,
    diagnostics: rsd.Sink | None=None,
) -> rsm.VersionTag | None:
    '''
    returns the greatest version found amongst the repository's tags, along with the commit
    (hexsha) the tag points to. Tags whose names are not (relaxed) semver versions are ignored.

    Both lightweight and annotated tags are honoured. Tags that do not (transitively) point to a
    commit are ignored.

    returns None if there is no version-tag (which is expected prior to the first release)
    '''
    emit = rsd.emitter(diagnostics, logger)

    candidates = version_util.sort_descending(
        _version_tags(repo=repo, emit=emit),
        converter=lambda candidate: candidate[0],
    )

    for parsed_version, tag in candidates:
        try:
            commit = tag.commit
        except gitutil.UNREADABLE_OBJECT_ERRORS as e:
            emit(
                logging.WARNING,
                'tag-not-a-commit',
                f'Tag {tag.name} does not point to a (readable) commit, skip: {e}',
                tag=tag.name,
            )
            continue

        emit(
            logging.DEBUG,
            'last-version-found',
            f'Found old version {parsed_version} with hash {commit.hexsha}',
            tag=tag.name,
            commit=commit.hexsha,
        )
        return rsm.VersionTag(
            version=parsed_version,
            tag_name=tag.name,
            commit_hash=commit.hexsha,
        )

    emit(logging.DEBUG, 'no-tags', 'Found no tags')
    return None
