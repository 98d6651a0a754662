# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

'''
Resolver configuration.

Configuration is read from the following sources (later sources take precedence; unset values
never overwrite set ones):

- defaults
- `.release-state.yaml` in repository root (or an explicitly passed cfg-file)
- environment variables (`RELEASE_STATE_BRANCH_SELECTION`, `RELEASE_STATE_LOG_LEVEL`)
- command line arguments
'''

import dataclasses
import logging
import os

import dacite
import yaml

import release_state.model as rsm

logger = logging.getLogger(__name__)

CFG_FILE_NAME = '.release-state.yaml'
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


@dataclasses.dataclass
class ResolverCfg:
    branch_selection: rsm.BranchSelection | None = None
    log_level: str | None = None

    def __post_init__(self):
        if self.log_level is not None:
            self.log_level = self.log_level.upper()
            if self.log_level not in LOG_LEVELS:
                raise ValueError(f'{self.log_level=} must be one of {LOG_LEVELS}')

    @property
    def effective_branch_selection(self) -> rsm.BranchSelection:
        return self.branch_selection or rsm.BranchSelection.FIRST_FOUND


def _from_dict(raw: dict) -> ResolverCfg:
    try:
        return dacite.from_dict(
            data_class=ResolverCfg,
            data=raw,
            config=dacite.Config(
                cast=[rsm.BranchSelection],
                strict=True,
            ),
        )
    except dacite.DaciteError as de:
        raise ValueError(f'invalid resolver-cfg: {de}') from de


def merge_cfgs(left: ResolverCfg | None, right: ResolverCfg | None) -> ResolverCfg | None:
    if not left or not right:
        return left or right # nothing to merge

    right_dict = {
        k: v for k, v in dataclasses.asdict(right).items()
        if v is not None
    }
    return dataclasses.replace(left, **right_dict)


def cfg_from_file(path: str) -> ResolverCfg | None:
    if not os.path.isfile(path):
        return None

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f'expected a mapping in {path}, found: {type(raw)}')

    logger.debug(f'read resolver-cfg from {path}')
    return _from_dict(raw)


def cfg_from_env(env=None) -> ResolverCfg | None:
    if env is None:
        env = os.environ

    raw = {}
    if (branch_selection := env.get('RELEASE_STATE_BRANCH_SELECTION')):
        raw['branch_selection'] = branch_selection
    if (log_level := env.get('RELEASE_STATE_LOG_LEVEL')):
        raw['log_level'] = log_level

    if not raw:
        return None

    return _from_dict(raw)


def load_cfg(
    repo_path: str | None=None,
    cfg_file: str | None=None,
    overrides: ResolverCfg | None=None,
    env=None,
) -> ResolverCfg:
    '''
    returns the effective resolver-cfg, merged from all sources. If `cfg_file` is passed, it
    must exist; otherwise, `.release-state.yaml` is looked up in `repo_path` (if passed).
    '''
    if cfg_file:
        if not os.path.isfile(cfg_file):
            raise ValueError(f'not an existing file: {cfg_file}')
    elif repo_path:
        cfg_file = os.path.join(repo_path, CFG_FILE_NAME)

    cfg = ResolverCfg()
    for additional_cfg in (
        cfg_from_file(cfg_file) if cfg_file else None,
        cfg_from_env(env=env),
        overrides,
    ):
        if not additional_cfg:
            continue
        cfg = merge_cfgs(cfg, additional_cfg)

    return cfg
