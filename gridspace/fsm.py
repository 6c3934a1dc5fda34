"""A finite state machine that filters message types per state."""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

_UINT32_MAX = 0xFFFFFFFF


@dataclass(eq=False)
class State:
    """A named state with the message types it allows and its transitions."""

    name: str
    msg_type_whitelist: str = ""
    msg_type_blacklist: str = ""
    allowed_msg_types: dict[int, bool] = field(default_factory=dict, repr=False)
    transitions: dict[int, State] = field(default_factory=dict, repr=False)

    def allows(self, msg_type: int) -> bool:
        """True if ``msg_type`` is whitelisted and not blacklisted."""
        return self.allowed_msg_types.get(msg_type, False)


@dataclass
class StateTransition:
    """Moves from ``from_state`` to ``to_state`` on receiving ``msg_type``."""

    from_state: str
    to_state: str
    msg_type: int = 0


def _parse_uint32(text: str) -> int | None:
    if not text or not text.isascii() or not text.isdigit():
        return None
    value = int(text)
    return value if value <= _UINT32_MAX else None


def parse_msg_types(s: str) -> Iterator[int]:
    """Yield the message types in a list such as ``"1, 2-10, 30"``.

    Segments that fail to parse are logged and skipped.
    """
    if not s:
        return
    for seg in s.split(","):
        seg = seg.strip(" ")
        parts = seg.split("-")
        if len(parts) == 1:
            value = _parse_uint32(parts[0])
            if value is None:
                logger.error("Can't convert '%s' to uint32", parts[0])
            else:
                yield value
            continue
        low = _parse_uint32(parts[0])
        if low is None:
            logger.error("Can't convert '%s' to uint32", parts[0])
            continue
        high = _parse_uint32(parts[1])
        if high is None:
            logger.error("Can't convert '%s' to uint32", parts[1])
            continue
        yield from range(low, high + 1)


class FiniteStateMachine:
    """States, their transitions and the current state, guarded by a lock."""

    def __init__(
        self,
        init_state: str | None = None,
        states: list[State] | None = None,
        transitions: list[StateTransition] | None = None,
    ) -> None:
        self.init_state = init_state
        self.states: list[State] = list(states or [])
        self.transitions: list[StateTransition] = list(transitions or [])
        self._lock = threading.RLock()
        self._current: State | None = self.states[0] if self.states else None
        self._by_name: dict[str, State] = {}

        for state in self.states:
            state.allowed_msg_types = {}
            state.transitions = {}
            self._by_name[state.name] = state
            for msg_type in parse_msg_types(state.msg_type_whitelist):
                state.allowed_msg_types[msg_type] = True
            for msg_type in parse_msg_types(state.msg_type_blacklist):
                state.allowed_msg_types[msg_type] = False

        for tr in self.transitions:
            from_state = self._by_name.get(tr.from_state)
            if from_state is None:
                logger.error(
                    "invalid FromState in StateTransition: %s -> %s (%d)",
                    tr.from_state, tr.to_state, tr.msg_type,
                )
                continue
            to_state = self._by_name.get(tr.to_state)
            if to_state is None:
                logger.error(
                    "invalid ToState in StateTransition: %s -> %s (%d)",
                    tr.from_state, tr.to_state, tr.msg_type,
                )
                continue
            from_state.transitions[tr.msg_type] = to_state

        if init_state is not None:
            self.change_state(init_state)

    def is_allowed(self, msg_type: int) -> bool:
        """True if the current state allows ``msg_type``."""
        with self._lock:
            return self._current is not None and self._current.allows(msg_type)

    def on_received(self, msg_type: int) -> None:
        """Follow the current state's transition for ``msg_type``, if any."""
        with self._lock:
            if self._current is None:
                return
            new_state = self._current.transitions.get(msg_type)
            if new_state is not None:
                self._current = new_state

    def current_state(self) -> State | None:
        with self._lock:
            return self._current

    def change_state(self, name: str) -> None:
        """Make the state called ``name`` current; ValueError if there is none."""
        with self._lock:
            state = self._by_name.get(name)
            if state is None:
                raise ValueError(f"Invalid state name: {name}")
            self._current = state

    def move_to_next_state(self) -> bool:
        """Advance to the state listed after the current one."""
        with self._lock:
            for state, following in zip(self.states, self.states[1:]):
                if self._current is state:
                    self._current = following
                    return True
            return False


def _field(obj: dict[str, Any], name: str, default: Any = None) -> Any:
    if name in obj:
        return obj[name]
    lowered = name.lower()
    for key, value in obj.items():
        if key.lower() == lowered:
            return value
    return default


def _expect_str(value: Any, what: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{what} should be a string")
    return value


def _expect_object(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{what} should be a JSON object")
    return value


def _expect_list(value: Any, what: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{what} should be a JSON array")
    return value


def _expect_uint32(value: Any, what: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{what} should be a number")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{what} should be an integer")
        value = int(value)
    if not 0 <= value <= _UINT32_MAX:
        raise ValueError(f"{what} is out of the uint32 range")
    return value


def load(data: str | bytes) -> FiniteStateMachine:
    """Build a state machine from its JSON description."""
    root = _expect_object(json.loads(data), "FSM config")

    states = []
    for item in _expect_list(_field(root, "States"), "States"):
        obj = _expect_object(item, "State")
        states.append(
            State(
                name=_expect_str(_field(obj, "Name"), "Name"),
                msg_type_whitelist=_expect_str(_field(obj, "MsgTypeWhitelist"), "MsgTypeWhitelist"),
                msg_type_blacklist=_expect_str(_field(obj, "MsgTypeBlacklist"), "MsgTypeBlacklist"),
            )
        )

    transitions = []
    for item in _expect_list(_field(root, "Transitions"), "Transitions"):
        obj = _expect_object(item, "StateTransition")
        transitions.append(
            StateTransition(
                from_state=_expect_str(_field(obj, "FromState"), "FromState"),
                to_state=_expect_str(_field(obj, "ToState"), "ToState"),
                msg_type=_expect_uint32(_field(obj, "MsgType"), "MsgType"),
            )
        )

    init_state = _field(root, "InitState")
    if init_state is not None:
        init_state = _expect_str(init_state, "InitState")

    return FiniteStateMachine(init_state=init_state, states=states, transitions=transitions)