'''
Release State Resolver

Determines, for a local git repository, the state any release tooling needs as input:

- the branch name of the current checkout
- the last released version (the greatest semver-tag) and the commit it points to
- all commits introduced since that version, each commit contained exactly once

Commits are collected by walking the first-parent chain from HEAD, additionally expanding the
merged-in branches of merge commits. The walk is bounded by the commit of the last release tag
(commits at or before it belong to the previous release). If there is no such tag, all commits
reachable from HEAD are collected.

All operations are read-only and local (no fetching or pushing is done).
'''
