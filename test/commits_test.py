import logging

import git
import pytest

import release_state.commits
import release_state.diagnostics as rsd
import release_state.errors as rse

import _test_utils


@pytest.fixture
def builder(tmp_path):
    return _test_utils.RepoBuilder(tmp_path / 'repo')


def collected_hexshas(commits) -> list[str]:
    return [c.hash for c in commits]


def test_linear_history_bounded(builder):
    builder.chain('A', 'B', 'C', 'D')
    builder.checkout('main', at='D')

    commits = release_state.commits.collect_commits(
        repo=builder.repo,
        boundary_hash=builder.commits['B'].hexsha,
    )

    assert collected_hexshas(commits) == [
        builder.commits['D'].hexsha,
        builder.commits['C'].hexsha,
    ]


def test_commit_attributes(builder):
    builder.chain('A', 'B')
    builder.checkout('main', at='B')

    commit, = release_state.commits.collect_commits(
        repo=builder.repo,
        boundary_hash=builder.commits['A'].hexsha,
    )

    assert commit.hash == builder.commits['B'].hexsha
    assert commit.message == 'B'
    # committer, not author
    assert commit.author == _test_utils.COMMITTER.name


def test_no_boundary_collects_whole_history(builder):
    builder.chain('A', 'B', 'C', 'D')
    builder.checkout('main', at='D')

    commits = release_state.commits.collect_commits(repo=builder.repo, boundary_hash='')

    assert set(collected_hexshas(commits)) == builder.hexsha('A', 'B', 'C', 'D')
    assert len(commits) == 4


def test_boundary_at_head(builder):
    builder.chain('A', 'B')
    builder.checkout('main', at='B')

    commits = release_state.commits.collect_commits(
        repo=builder.repo,
        boundary_hash=builder.commits['B'].hexsha,
    )

    assert commits == ()


def test_merged_branch_is_included(builder):
    #   A - B - C ---- M    (main, boundary: B)
    #    \            /
    #     F1 ------ F2      (feature)
    builder.chain('A', 'B', 'C')
    builder.chain('F1', 'F2', parent='A')
    builder.commit('M', 'C', 'F2')
    builder.checkout('main', at='M')

    commits = release_state.commits.collect_commits(
        repo=builder.repo,
        boundary_hash=builder.commits['B'].hexsha,
    )
    hexshas = collected_hexshas(commits)

    assert len(hexshas) == len(set(hexshas))
    assert set(hexshas) == builder.hexsha('M', 'C', 'F1', 'F2')
    # merge-commit comes first, its merged branch right after it
    assert hexshas[0] == builder.commits['M'].hexsha
    assert hexshas[1:3] == [builder.commits['F2'].hexsha, builder.commits['F1'].hexsha]


def test_merged_branch_forked_after_boundary(builder):
    #   A - B - C - D - M
    #            \     /
    #             F ---
    builder.chain('A', 'B', 'C', 'D')
    builder.commit('F', 'C')
    builder.commit('M', 'D', 'F')
    builder.checkout('main', at='M')

    commits = release_state.commits.collect_commits(
        repo=builder.repo,
        boundary_hash=builder.commits['B'].hexsha,
    )
    hexshas = collected_hexshas(commits)

    # C is reachable via both parents of M
    assert len(hexshas) == len(set(hexshas))
    assert set(hexshas) == builder.hexsha('M', 'D', 'C', 'F')


def test_boundary_on_merged_branch(builder):
    #   A - C ------- M
    #    \           /
    #     F1 ----- F2       (boundary: F1)
    builder.chain('A', 'C')
    builder.chain('F1', 'F2', parent='A')
    builder.commit('M', 'C', 'F2')
    builder.checkout('main', at='M')

    commits = release_state.commits.collect_commits(
        repo=builder.repo,
        boundary_hash=builder.commits['F1'].hexsha,
    )

    # ancestors of boundary (F1, A) must not be contained
    assert set(collected_hexshas(commits)) == builder.hexsha('M', 'C', 'F2')


def test_commits_reachable_via_many_paths_are_unique(builder):
    #   A - B ------ M1 ----- M2 ---- M3
    #        \      /        /       /
    #         X    /        /       /
    #          \  /        /       /
    #           Y --------+------ Z
    builder.chain('A', 'B')
    builder.chain('X', 'Y', parent='B')
    builder.commit('M1', 'B', 'Y')
    builder.commit('M2', 'M1', 'Y')
    builder.commit('Z', 'Y')
    builder.commit('M3', 'M2', 'Z')
    builder.checkout('main', at='M3')

    for boundary, expected in (
        ('', ('A', 'B', 'X', 'Y', 'Z', 'M1', 'M2', 'M3')),
        ('A', ('B', 'X', 'Y', 'Z', 'M1', 'M2', 'M3')),
        ('Y', ('Z', 'M1', 'M2', 'M3')),
    ):
        boundary_hash = builder.commits[boundary].hexsha if boundary else ''
        commits = release_state.commits.collect_commits(
            repo=builder.repo,
            boundary_hash=boundary_hash,
        )
        hexshas = collected_hexshas(commits)

        assert len(hexshas) == len(set(hexshas))
        assert set(hexshas) == builder.hexsha(*expected)


def test_octopus_merge(builder):
    builder.chain('A', 'B')
    builder.commit('F1', 'A')
    builder.commit('F2', 'A')
    builder.commit('M', 'B', 'F1', 'F2')
    builder.checkout('main', at='M')

    commits = release_state.commits.collect_commits(
        repo=builder.repo,
        boundary_hash=builder.commits['A'].hexsha,
    )

    assert set(collected_hexshas(commits)) == builder.hexsha('M', 'B', 'F1', 'F2')


def test_detached_head(builder):
    builder.chain('A', 'B', 'C')
    builder.checkout('main', at='C')
    builder.detach(at='B')

    commits = release_state.commits.collect_commits(repo=builder.repo)

    assert set(collected_hexshas(commits)) == builder.hexsha('A', 'B')


def test_diagnostics(builder):
    builder.chain('A', 'B', 'C')
    builder.checkout('main', at='C')
    sink = rsd.CollectingSink()

    release_state.commits.collect_commits(
        repo=builder.repo,
        boundary_hash=builder.commits['A'].hexsha,
        diagnostics=sink,
    )

    assert sink.events() == [
        'commit',
        'commit',
        'boundary-reached',
        'commits-collected',
    ]
    assert sink.diagnostics[2].details['commit'] == builder.commits['A'].hexsha
    assert set(sink.events(level=logging.DEBUG)) == set(sink.events())


def test_unknown_boundary(builder):
    builder.chain('A', 'B')
    builder.checkout('main', at='B')

    with pytest.raises(rse.CommitHistoryReadError) as exc_info:
        release_state.commits.collect_commits(
            repo=builder.repo,
            boundary_hash='0123456789abcdef0123456789abcdef01234567',
        )

    assert 'clone depth' in str(exc_info.value)


def test_boundary_must_be_commit_hash(builder):
    builder.chain('A', 'B')
    builder.checkout('main', at='B')

    for boundary_hash in ('--all', 'HEAD~1', 'main'):
        with pytest.raises(ValueError):
            release_state.commits.collect_commits(
                repo=builder.repo,
                boundary_hash=boundary_hash,
            )

    # abbreviated hashes are fine
    commits = release_state.commits.collect_commits(
        repo=builder.repo,
        boundary_hash=builder.commits['A'].hexsha[:10],
    )

    assert collected_hexshas(commits) == [builder.commits['B'].hexsha]


def test_empty_repository(builder):
    with pytest.raises(rse.CommitHistoryReadError):
        release_state.commits.collect_commits(repo=builder.repo)


def _shallow_clone(builder, tmp_path, depth: int) -> git.Repo:
    return git.Repo.clone_from(
        f'file://{builder.repo.working_tree_dir}',
        tmp_path / 'shallow',
        depth=depth,
    )


def test_shallow_clone_without_boundary(builder, tmp_path):
    builder.chain('A', 'B', 'C', 'D')
    builder.checkout('main', at='D')
    shallow = _shallow_clone(builder, tmp_path, depth=2)
    sink = rsd.CollectingSink()

    commits = release_state.commits.collect_commits(
        repo=shallow,
        boundary_hash='',
        diagnostics=sink,
    )

    assert set(collected_hexshas(commits)) == builder.hexsha('C', 'D')
    assert 'history-truncated' in sink.events()


def test_shallow_clone_missing_boundary(builder, tmp_path):
    builder.chain('A', 'B', 'C', 'D')
    builder.checkout('main', at='D')
    shallow = _shallow_clone(builder, tmp_path, depth=2)

    with pytest.raises(rse.CommitHistoryReadError):
        release_state.commits.collect_commits(
            repo=shallow,
            boundary_hash=builder.commits['A'].hexsha,
        )


def test_shallow_clone_unreadable_merge_parent(builder, tmp_path):
    builder.chain('A', 'B')
    builder.commit('F', 'A')
    builder.commit('M', 'B', 'F')
    builder.checkout('main', at='M')
    shallow = _shallow_clone(builder, tmp_path, depth=1)
    sink = rsd.CollectingSink()

    commits = release_state.commits.collect_commits(
        repo=shallow,
        diagnostics=sink,
    )

    assert collected_hexshas(commits) == [builder.commits['M'].hexsha]
    assert 'parent-unreadable' in sink.events()
    assert 'history-truncated' in sink.events()
