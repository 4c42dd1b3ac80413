"""Peripheral-to-identifier matching logic."""

from __future__ import annotations

from collections.abc import Iterable

from gattscout.core.model import MatchMode
from gattscout.transports.base import Peripheral


def identifier_matches(candidate: str, identifier: str, mode: MatchMode = MatchMode.EXACT) -> bool:
    if mode is MatchMode.CASEFOLD:
        return candidate.casefold() == identifier.casefold()
    if mode is MatchMode.PREFIX:
        return candidate.startswith(identifier)
    return candidate == identifier


def select(
    peripherals: Iterable[Peripheral],
    identifier: str,
    mode: MatchMode = MatchMode.EXACT,
) -> list[Peripheral]:
    return [p for p in peripherals if identifier_matches(p.identifier(), identifier, mode)]
