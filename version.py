# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import logging
import re
import typing

import semver

logger = logging.getLogger(__name__)

Version = semver.VersionInfo | str

# accepted (and preserved) prefixes for version-strings, e.g. `v1.2.3`
VERSION_PREFIXES = ('v', 'V')


def parse_to_semver(
    version: Version,
    invalid_semver_ok: bool=False,
) -> semver.VersionInfo | None:
    '''
    parses the given version into a semver.VersionInfo object.

    Different from strict semver, the given version is preprocessed, if required, to
    convert the version into a valid semver version, if possible.

    The following preprocessings are done:

    - strip away `v` prefix
    - append patch-level `.0` for two-digit versions
    - rm leading zeroes

    if `invalid_semver_ok` is set to True, None is returned for unparsable versions (raises
    ValueError otherwise)
    '''
    if isinstance(version, semver.VersionInfo):
        return version
    if version is None:
        raise ValueError('version must not be None')
    if not isinstance(version, str):
        logger.warning(f'unexpected type for version: {type(version)}')
        version = str(version) # fallback

    try:
        semver_version_info, _ = parse_to_semver_and_prefix(version)
    except ValueError:
        if invalid_semver_ok:
            return None

        raise

    return semver_version_info


def parse_to_semver_and_prefix(version: str) -> tuple[semver.VersionInfo, str | None]:
    def raise_invalid():
        raise ValueError(f'not a valid (semver) version: `{version}`')

    # semver-versions consist of ASCII characters only
    if not version or not version.isascii():
        raise_invalid()

    semver_version = version
    prefix = None

    if version[0] in VERSION_PREFIXES:
        semver_version = version[1:]
        prefix = version[0]

    # in most cases, we should be fine now
    try:
        return semver.VersionInfo.parse(semver_version), prefix
    except ValueError:
        pass # try extending `.0` as patch-level

    # blindly append patch-level
    if '-' in semver_version:
        sep = '-'
    else:
        sep = '+'

    numeric, sep, suffix = semver_version.partition(sep)
    if numeric.count('.') == 1:
        numeric += '.0'

    try:
        return semver.VersionInfo.parse(numeric + sep + suffix), prefix
    except ValueError:
        pass # last try: strip leading zeroes

    parts = numeric.split('.')
    if len(parts) != 3 or not all(re.fullmatch(r'[0-9]+', part) for part in parts):
        raise_invalid()

    major, minor, patch = (int(part) for part in parts)
    numeric = f'{major}.{minor}.{patch}'

    try:
        return semver.VersionInfo.parse(numeric + sep + suffix), prefix
    except ValueError:
        # re-raise with original version str
        raise_invalid()


T = typing.TypeVar('T')


def sort_descending(
    versions: typing.Iterable[T],
    converter: typing.Callable[[T], Version]=None,
) -> list[T]:
    '''
    sorts the given versions by semver-precedence, greatest version first. Versions of equal
    precedence (e.g. `1.0.0` and `v1.0.0`, or versions differing only in build-metadata) retain
    their relative order.

    `converter`: optional value-conversion-callback (for convenience)
    '''
    def _parse_version(version: T):
        if converter:
            version = converter(version)
        return parse_to_semver(version)

    return sorted(
        versions,
        key=_parse_version,
        reverse=True,
    )
