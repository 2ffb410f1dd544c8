from __future__ import annotations


_TARGET = {"kind": "chooseTarget", "min": 1, "max": 1}
_TWO_TARGETS = {"kind": "chooseTwoTargets", "min": 2, "max": 2}
_NONE = {"kind": "none"}


# Shape matches the JSON accepted through CARD_CATALOG_PATH.
DEFAULT_CARDS: list[dict] = [
    # Forfeits
    {"id": "f1", "type": "forfeit", "title": "Drink", "body": "Take 1 drink.", "resolution": _NONE},
    {"id": "f2", "type": "forfeit", "title": "Double Down", "body": "Take 2 drinks.", "resolution": _NONE},
    {"id": "f3", "type": "forfeit", "title": "Give 2", "body": "Give 2 drinks to another player.", "resolution": _TARGET},
    {
        "id": "f4",
        "type": "forfeit",
        "title": "Pick Your Poison",
        "body": "Choose a player and how many drinks they take.",
        "resolution": {"kind": "chooseTargetAndNumber", "numMin": 1, "numMax": 5},
    },
    {"id": "f5", "type": "forfeit", "title": "Drinking Buddies", "body": "Pick two players. They each drink 1.", "resolution": _TWO_TARGETS},
    {
        "id": "f6",
        "type": "forfeit",
        "title": "Countdown",
        "body": "Pick a number. Everyone counts down from it; whoever says the last number drinks.",
        "resolution": {"kind": "chooseNumber", "numMin": 3, "numMax": 10},
    },
    {"id": "f101", "type": "forfeit", "title": "All Black", "body": "Drink if you are wearing black.", "resolution": _NONE},
    {"id": "f102", "type": "forfeit", "title": "Tall Order", "body": "Drink if you are 6ft (183cm) or taller.", "resolution": _NONE},
    {"id": "f106", "type": "forfeit", "title": "Sibling Rivalry", "body": "Take 1 drink for every sibling you have.", "resolution": _NONE},
    {"id": "f108", "type": "forfeit", "title": "Pet Owner", "body": "Drink if you own a pet.", "resolution": _NONE},
    {"id": "f112", "type": "forfeit", "title": "Tattooed", "body": "Drink if you have at least one tattoo.", "resolution": _NONE},
    {"id": "f122", "type": "forfeit", "title": "Late Night", "body": "Drink if you stayed up past 2am last night.", "resolution": _NONE},
    {"id": "f131", "type": "forfeit", "title": "Traveler", "body": "Drink if you have been to another country.", "resolution": _NONE},
    {"id": "f145", "type": "forfeit", "title": "Phone Battery", "body": "Drink if your phone battery is under 20%.", "resolution": _NONE},
    {"id": "f147", "type": "forfeit", "title": "Work Tomorrow", "body": "Drink if you have work tomorrow.", "resolution": _NONE},
    {"id": "f150", "type": "forfeit", "title": "First Timer", "body": "Drink if this is your first time playing Sociables.", "resolution": _NONE},
    # Rules
    {
        "id": "r1",
        "type": "rule",
        "title": "Make a Rule",
        "body": "Create a new rule. Anyone who breaks it drinks.",
        "resolution": {"kind": "createRuleText", "maxLen": 80},
    },
    {"id": "r2", "type": "rule", "title": "End All Rules", "body": "All rules are cleared.", "resolution": _NONE, "effect": "clearRules"},
    {"id": "r3", "type": "rule", "title": "No Pointing", "body": "Nobody may point. Anyone who points drinks.", "resolution": _NONE},
    {"id": "r4", "type": "rule", "title": "Category", "body": "Pick a category and go around the circle naming items. First to fail drinks.", "resolution": _NONE},
    # Roles
    {"id": "ro1", "type": "role", "title": "Thumb Master", "body": "When you place your thumb down, last person drinks.", "resolution": _TARGET},
    {"id": "ro2", "type": "role", "title": "Question Master", "body": "Anyone who answers your questions drinks.", "resolution": _TARGET},
    # Curses
    {"id": "c1", "type": "curse", "title": "Left Hand Curse", "body": "You must drink with your left hand.", "resolution": _TARGET},
    {"id": "c2", "type": "curse", "title": "No Names", "body": "You may not say anyone's name.", "resolution": _TARGET},
    # Events
    {"id": "e1", "type": "event", "title": "Socials", "body": "Everyone drinks.", "resolution": _NONE},
    {"id": "e2", "type": "event", "title": "Reverse", "body": "Turn order reverses.", "resolution": _NONE},
    # Jokers
    {"id": "j1", "type": "joker", "title": "Cleanse Curse", "body": "Remove a curse from a player.", "resolution": _TARGET, "effect": "cleanseCurse"},
    {"id": "j2", "type": "joker", "title": "Transfer Curse", "body": "Move a curse from one player to another.", "resolution": _TWO_TARGETS, "effect": "transferCurse"},
    {"id": "j3", "type": "joker", "title": "Reset Roles", "body": "All roles are removed.", "resolution": _NONE, "effect": "resetRoles"},
    # Interactive
    {
        "id": "i1",
        "type": "duel",
        "title": "Rock Paper Scissors",
        "body": "Challenge a player. Loser drinks 1, a tie means both drink.",
        "resolution": {"kind": "rockPaperScissors", "min": 1, "max": 1},
    },
    {
        "id": "i2",
        "type": "vote",
        "title": "Would You Rather",
        "body": "A) Always be 10 minutes late\nB) Always be 20 minutes early",
        "resolution": {"kind": "wouldYouRather"},
    },
    {
        "id": "i3",
        "type": "vote",
        "title": "Would You Rather",
        "body": "A) Give up music\nB) Give up films",
        "resolution": {"kind": "wouldYouRather"},
    },
]
