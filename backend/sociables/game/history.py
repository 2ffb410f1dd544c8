from __future__ import annotations

from .models import LogItem, LogType, Room


LOG_LIMIT = 200


def push_log(
    room: Room,
    log_type: LogType,
    text: str,
    now_ms: int,
    actor_id: str | None = None,
    card_id: str | None = None,
) -> LogItem:
    item = LogItem(ts=now_ms, type=log_type, text=text, actor_id=actor_id, card_id=card_id)
    room.log.append(item)
    if len(room.log) > LOG_LIMIT:
        del room.log[: len(room.log) - LOG_LIMIT]
    return item
