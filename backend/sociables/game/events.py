from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Event:
    """One message to push to a Socket.IO room or a single connection."""

    name: str
    payload: dict
    to: str
    # close this Socket.IO room once the event is out
    close_room: str | None = None
    # (sid, room) to drop from a Socket.IO room once the event is out
    leave: tuple[str, str] | None = None


@dataclass
class Outcome:
    result: dict = field(default_factory=dict)
    events: list[Event] = field(default_factory=list)

    def names(self) -> list[str]:
        return [e.name for e in self.events]
