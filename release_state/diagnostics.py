# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

'''
Diagnostic events emitted while resolving release-state.

Components do not log per-commit or per-tag detail on their own. Instead, they pass events to a
`Sink` (a plain callable) handed in by the caller. If no sink is passed, events are forwarded to
the emitting module's logger (see `logging_sink`).
'''

import dataclasses
import logging
import typing


@dataclasses.dataclass(frozen=True)
class Diagnostic:
    level: int # one of logging's levels
    event: str
    message: str
    details: dict[str, str] = dataclasses.field(default_factory=dict)


Sink = typing.Callable[[Diagnostic], None]


def logging_sink(logger: logging.Logger) -> Sink:
    def emit(diagnostic: Diagnostic):
        logger.log(diagnostic.level, diagnostic.message)

    return emit


class CollectingSink:
    '''
    accumulates all received diagnostics (useful for tests, or for callers that wish to render
    diagnostics themselves)
    '''
    def __init__(self):
        self.diagnostics: list[Diagnostic] = []

    def __call__(self, diagnostic: Diagnostic):
        self.diagnostics.append(diagnostic)

    def events(self, level: int | None=None) -> list[str]:
        return [
            d.event for d in self.diagnostics
            if level is None or d.level == level
        ]


def emitter(
    sink: Sink | None,
    logger: logging.Logger,
) -> typing.Callable[..., None]:
    '''
    returns a convenience function for emitting diagnostics to the given sink (falling back to a
    `logging_sink` for the given logger if sink is None).
    '''
    if sink is None:
        sink = logging_sink(logger)

    def emit(
        level: int,
        event: str,
        message: str,
        **details,
    ):
        sink(Diagnostic(
            level=level,
            event=event,
            message=message,
            details={k: str(v) for k, v in details.items()},
        ))

    return emit
