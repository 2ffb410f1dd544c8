from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from ..game.catalog import card_to_dict

bp = Blueprint("cards", __name__)


@bp.get("/cards")
def list_cards():
    catalog = current_app.extensions["sociables"]["service"].catalog
    cards = catalog.base_cards()
    # ?custom=1 includes admin-authored cards
    if request.args.get("custom") == "1":
        cards = [*cards, *catalog.custom_cards()]
    return jsonify({"cards": [card_to_dict(c) for c in cards]})
