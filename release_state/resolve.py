# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import logging

import gitutil
import release_state.branch
import release_state.commits
import release_state.config as rsc
import release_state.diagnostics as rsd
import release_state.model as rsm
import release_state.tags

logger = logging.getLogger(__name__)


def resolve(
    repo_path: str,
    cfg: rsc.ResolverCfg | None=None,
    diagnostics: rsd.Sink | None=None,
) -> rsm.ReleaseState:
    '''
    resolves the release-state of the git-repository at `repo_path`: the current branch, the last
    released version (if any), and all commits since that version.

    raises the first fatal error encountered (see `release_state.errors`)
    '''
    if not cfg:
        cfg = rsc.ResolverCfg()

    repo = gitutil.open_repository(repo_path)

    try:
        branch = release_state.branch.resolve_branch(
            repo=repo,
            selection=cfg.effective_branch_selection,
            diagnostics=diagnostics,
        )
        last_version = release_state.tags.find_last_version(
            repo=repo,
            diagnostics=diagnostics,
        )
        if last_version:
            boundary_hash = last_version.commit_hash
            logger.info(f'last version is {last_version.tag_name} ({boundary_hash})')
        else:
            boundary_hash = ''
            logger.info('no previous version found - considering all commits')

        commits = release_state.commits.collect_commits(
            repo=repo,
            boundary_hash=boundary_hash,
            diagnostics=diagnostics,
        )
        head_hash = gitutil.head_commit(repo).hexsha
    finally:
        repo.close()

    logger.info(f'found {len(commits)} commit(s) on {branch=} since last release')

    return rsm.ReleaseState(
        branch=branch,
        head_hash=head_hash,
        last_version=last_version,
        commits=commits,
    )
