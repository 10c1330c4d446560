"""
Mutable regional wall-motion state: one severity per segment plus the
currently selected named pattern.

Every mutation is persisted to the injected settings backend under two fixed
keys and then announced to listeners, in registration order, with either the
changed segment id or the ALL_SEGMENTS sentinel.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Protocol, Union

from .segments import (
    NO_PATTERN,
    SEGMENT_IDS,
    Pattern,
    PatternId,
    Severity,
    pattern_info,
    segment_info,
)

logger = logging.getLogger(__name__)

STATE_KEY = "motility-state"
PATTERN_KEY = "motility-pattern"

# Listener argument when every segment may have changed
ALL_SEGMENTS = "all"

_VALID_LEVELS = frozenset(level.value for level in Severity)

ChangeTarget = Union[int, str]
Listener = Callable[[ChangeTarget, "MotilityState"], None]


class SettingsBackend(Protocol):
    def get_setting(self, key: str) -> str | None: ...

    def set_setting(self, key: str, value: str) -> None: ...


@dataclass(frozen=True)
class MotilityState:
    """Read-only snapshot handed to the metrics and narrative generators."""

    severities: Mapping[int, Severity]
    active_pattern: str = NO_PATTERN

    @property
    def pattern(self) -> Pattern | None:
        if self.active_pattern == NO_PATTERN:
            return None
        return pattern_info(self.active_pattern)

    def severity(self, segment_id: int) -> Severity:
        return self.severities.get(segment_id, Severity.NORMAL)

    @classmethod
    def from_mapping(
        cls, severities: Mapping[int, int], active_pattern: str = NO_PATTERN
    ) -> MotilityState:
        """Build a complete snapshot; ids missing from the mapping are Normal."""
        full = {sid: Severity(severities.get(sid, Severity.NORMAL)) for sid in SEGMENT_IDS}
        return cls(severities=MappingProxyType(full), active_pattern=active_pattern)


def _default_severities() -> dict[int, Severity]:
    return {sid: Severity.NORMAL for sid in SEGMENT_IDS}


def _decode_severities(raw: str | None) -> dict[int, Severity] | None:
    """Parse the persisted JSON map. Returns None when absent or malformed."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Persisted motility state is not valid JSON; using defaults")
        return None
    if not isinstance(data, dict):
        logger.warning("Persisted motility state is not an object; using defaults")
        return None

    severities = _default_severities()
    try:
        for key, value in data.items():
            segment_id = int(key)
            if (
                segment_id not in severities
                or isinstance(value, bool)
                or not isinstance(value, (int, float))
                or value not in _VALID_LEVELS
            ):
                raise ValueError(f"bad entry {key!r}: {value!r}")
            severities[segment_id] = Severity(int(value))
    except (TypeError, ValueError) as e:
        logger.warning(f"Persisted motility state is malformed ({e}); using defaults")
        return None
    return severities


def _decode_pattern(raw: str | None) -> str:
    if not raw or raw == NO_PATTERN:
        return NO_PATTERN
    try:
        return PatternId(raw).value
    except ValueError:
        logger.warning(f"Persisted motility pattern '{raw}' is unknown; clearing it")
        return NO_PATTERN


class MotilityStore:
    """Owns the segment -> severity map and the active pattern."""

    def __init__(self, backend: SettingsBackend) -> None:
        self._backend = backend
        self._listeners: list[Listener] = []
        loaded = _decode_severities(backend.get_setting(STATE_KEY))
        self._severities: dict[int, Severity] = loaded or _default_severities()
        self._pattern: str = _decode_pattern(backend.get_setting(PATTERN_KEY))

    # --- Reads ---

    @property
    def active_pattern(self) -> str:
        return self._pattern

    @property
    def severities(self) -> dict[int, Severity]:
        return dict(self._severities)

    @property
    def state(self) -> MotilityState:
        return MotilityState(
            severities=MappingProxyType(dict(self._severities)),
            active_pattern=self._pattern,
        )

    def get_severity(self, segment_id: int) -> Severity:
        segment_info(segment_id)
        return self._severities.get(segment_id, Severity.NORMAL)

    # --- Mutations ---

    def toggle_segment(self, segment_id: int) -> Severity:
        """Advance Normal -> Hypo -> Aki -> Dys -> Normal."""
        new_level = self.get_severity(segment_id).next()
        self._commit({**self._severities, segment_id: new_level}, self._pattern, segment_id)
        logger.debug(f"Segment {segment_id} toggled to {new_level.name}")
        return new_level

    def set_severity(self, segment_id: int, level: int) -> None:
        """Set one segment directly. Out-of-range levels are ignored."""
        segment_info(segment_id)
        if (
            isinstance(level, bool)
            or not isinstance(level, (int, float))
            or level not in _VALID_LEVELS
        ):
            logger.debug(f"Ignoring invalid severity {level!r} for segment {segment_id}")
            return
        self._commit(
            {**self._severities, segment_id: Severity(level)}, self._pattern, segment_id
        )

    def apply_pattern(self, name: str | PatternId) -> None:
        """Select a named pattern.

        'none' only clears the selection and leaves segment severities as they
        are. Any other pattern resets every segment to Normal and marks its
        affected segments with the pattern's default severity.
        """
        name = name.value if isinstance(name, PatternId) else name
        if name == NO_PATTERN:
            self._commit(dict(self._severities), NO_PATTERN, ALL_SEGMENTS)
            logger.info("Motility pattern cleared")
            return

        pattern = pattern_info(name)
        severities = _default_severities()
        for segment_id in pattern.affected_segments:
            severities[segment_id] = pattern.default_severity
        self._commit(severities, pattern.id.value, ALL_SEGMENTS)
        logger.info(
            f"Applied motility pattern '{pattern.id.value}' "
            f"({len(pattern.affected_segments)} segments)"
        )

    def reset(self) -> None:
        self._commit(_default_severities(), NO_PATTERN, ALL_SEGMENTS)
        logger.info("Motility state reset")

    # --- Observers ---

    def subscribe(self, callback: Listener) -> None:
        self._listeners.append(callback)

    # --- Internals ---

    def _commit(
        self, severities: dict[int, Severity], pattern: str, target: ChangeTarget
    ) -> None:
        """Swap in fully computed state, persist it, then notify listeners."""
        self._severities = severities
        self._pattern = pattern
        self._save()
        snapshot = self.state
        for callback in list(self._listeners):
            callback(target, snapshot)

    def _save(self) -> None:
        payload = {str(sid): int(level) for sid, level in sorted(self._severities.items())}
        self._backend.set_setting(STATE_KEY, json.dumps(payload))
        self._backend.set_setting(PATTERN_KEY, self._pattern)
