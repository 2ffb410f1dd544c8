from __future__ import annotations

from .models import Duel, GroupVote, PendingAck, Player, Room
from .turns import active_players, current_turn_player


def player_public(p: Player) -> dict:
    # sid stays server-side
    return {
        "playerId": p.id,
        "name": p.name,
        "seatIndex": p.seat_index,
        "connected": p.connected,
        "mode": p.mode,
    }


def ack_public(a: PendingAck) -> dict:
    payload = {
        "ackId": a.ack_id,
        "createdAt": a.created_at_ms,
        "cardId": a.card_id,
        "cardTitle": a.card_title,
        "instruction": a.instruction,
        "createdByPlayerId": a.created_by,
        "assignedToPlayerId": a.assigned_to,
        "status": a.status,
        "confirmedAt": a.confirmed_at_ms,
    }
    if a.meta is not None:
        payload["meta"] = {
            "kind": a.meta.kind,
            "numberValue": a.meta.number_value,
            "ruleText": a.meta.rule_text,
            "targets": list(a.meta.targets),
        }
    return payload


def interaction_public(room: Room) -> dict | None:
    inter = room.interaction
    if isinstance(inter, Duel):
        # choices stay hidden until the duel resolves
        return {
            "kind": inter.kind,
            "cardId": inter.card_id,
            "startedByPlayerId": inter.started_by,
            "opponentPlayerId": inter.opponent,
            "createdAt": inter.created_at_ms,
            "expiresAt": inter.expires_at_ms,
            "chosen": [pid for pid in inter.participants if pid in inter.choices],
        }
    if isinstance(inter, GroupVote):
        return {
            "kind": inter.kind,
            "cardId": inter.card_id,
            "startedByPlayerId": inter.started_by,
            "createdAt": inter.created_at_ms,
            "expiresAt": inter.expires_at_ms,
            "optionA": inter.option_a,
            "optionB": inter.option_b,
            "voted": list(inter.votes.keys()),
            "eligible": len(active_players(room)),
        }
    return None


def room_public_state(room: Room) -> dict:
    effects = room.active_effects
    timer = room.turn_timer
    turn_player = current_turn_player(room)
    return {
        "roomCode": room.code,
        "deckOrder": list(room.deck_order),
        "drawIndex": room.draw_index,
        "discard": list(room.discard),
        "players": [player_public(p) for p in room.players],
        "spectators": [player_public(s) for s in room.spectators],
        "turnIndex": room.turn_index,
        "turnPlayerId": turn_player.id if turn_player else None,
        "currentDraw": (
            {"cardId": room.current_draw.card_id, "drawnByPlayerId": room.current_draw.drawn_by}
            if room.current_draw
            else None
        ),
        "activeEffects": {
            "rules": [{"id": r.id, "text": r.text, "createdBy": r.created_by} for r in effects.rules],
            "rolesByPlayerId": dict(effects.roles_by_player_id),
            "cursesByPlayerId": dict(effects.curses_by_player_id),
            "currentEvent": (
                {"id": effects.current_event.id, "title": effects.current_event.title}
                if effects.current_event
                else None
            ),
        },
        "turnTimer": (
            {
                "enabled": timer.enabled,
                "secondsTotal": timer.seconds_total,
                "endsAt": timer.ends_at_ms,
                "reason": timer.reason,
            }
            if timer
            else None
        ),
        "interaction": interaction_public(room),
        "pendingAcks": [ack_public(a) for a in room.pending_acks],
        "drinkStats": {pid: {"given": s.given, "taken": s.taken} for pid, s in room.drink_stats.items()},
        "settings": {
            "safeMode": room.settings.safe_mode,
            "dynamicWeighting": room.settings.dynamic_weighting,
            "theme": room.settings.theme,
            "sfx": room.settings.sfx,
            "haptics": room.settings.haptics,
            "customDeckOrder": list(room.settings.custom_deck_order),
        },
        "log": [
            {"ts": i.ts, "type": i.type, "text": i.text, "actorId": i.actor_id, "cardId": i.card_id}
            for i in room.log
        ],
        "createdAt": room.created_at_ms,
        "lastActivity": room.last_activity_ms,
    }


def room_admin_summary(room: Room) -> dict:
    host = next((p for p in room.players if p.seat_index == 0), None)
    turn_player = current_turn_player(room)
    return {
        "roomCode": room.code,
        "playerCount": len(room.players),
        "spectatorCount": len(room.spectators),
        "hostName": host.name if host else "Unknown",
        "createdAt": room.created_at_ms,
        "lastActivity": room.last_activity_ms,
        "currentTurn": turn_player.name if turn_player else "None",
        "players": [player_public(p) for p in room.players],
        "spectators": [player_public(s) for s in room.spectators],
    }
