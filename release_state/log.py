# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


from copy import copy
import logging
import sys


class Bcolors:
    RESET_ALL = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'


class LevelColourFormatter(logging.Formatter):
    '''
    colours level-names if writing to a tty (exposed to format-strings as `levelprefix`)
    '''
    level_colours = {
        logging.DEBUG: Bcolors.BLUE,
        logging.INFO: Bcolors.GREEN,
        logging.WARNING: Bcolors.YELLOW,
        logging.ERROR: Bcolors.RED,
    }

    def __init__(self, *args, stream=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.stream = stream or sys.stderr

    def colour_level_name(self, level_name: str, level_number: int) -> str:
        if not (colour := self.level_colours.get(level_number)):
            return level_name
        return f'{Bcolors.BOLD}{colour}{level_name}{Bcolors.RESET_ALL}'

    def formatMessage(self, record):
        record_copy = copy(record)
        levelname = record_copy.levelname
        if self.stream.isatty():
            levelname = self.colour_level_name(levelname, record_copy.levelno)
        record_copy.__dict__['levelprefix'] = levelname
        return super().formatMessage(record_copy)


def default_fmt_string() -> str:
    return '%(asctime)s [%(levelprefix)s] %(name)s: %(message)s'


def configure_default_logging(
    level=None,
    force=True,
):
    '''
    configures root-logger to emit to stderr (stdout is reserved for resolved release-state)
    '''
    if not level:
        level = logging.INFO

    # make sure to have a clean root logger (in case setup is called multiple times)
    if force:
        handlers = list(logging.root.handlers)
        for h in handlers:
            logging.root.removeHandler(h)
            h.close()

    sh = logging.StreamHandler(stream=sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(LevelColourFormatter(fmt=default_fmt_string(), stream=sys.stderr))

    logging.root.addHandler(hdlr=sh)
    logging.root.setLevel(level=level)

    # too verbose (logs each git-command)
    logging.getLogger('git').setLevel(logging.WARNING)
