# quiz_data.py
# Edit/extend questions, weights & profiles here, or point PQ_QUIZ at a JSON
# file with the same shape.
import json

from quiz_engine import InvalidConfiguration

QUIZ = {
    "id": "love-machine",
    "title": "What kind of lover are you?",
    "questions": [
        {
            "text": "what does love feel like?",
            "answers": [
                ("a warm glow",         {"OPTIMIST": 2, "ROMANTIC": 1}),
                ("an overclocked fan",  {"SEEKER": 2, "ROMANTIC": 1}),
                ("an unexpected error", {"CYNIC": 2, "REALIST": 1}),
            ],
        },
        {
            "text": "how do you know that it is love?",
            "answers": [
                ("the brightness stays at 100%", {"OPTIMIST": 2, "ROMANTIC": 1}),
                ("it is saved to memory",        {"REALIST": 2, "SEEKER": 1}),
                ("i exit the window asap",       {"CYNIC": 2}),
            ],
        },
        {
            "text": "if you delete someone from memory... is the love gone?",
            "answers": [
                ("never. it is hard coded",             {"ROMANTIC": 1, "OPTIMIST": 1}),
                ("traces will always remain",           {"SEEKER": 2, "REALIST": 1}),
                ("the name is gone. the ache survives", {"CYNIC": 2, "REALIST": 1}),
            ],
        },
        {
            "text": "why does it still hurt even after it is over?",
            "answers": [
                ("the memory is golden",      {"OPTIMIST": 1}),
                ("the memory loops forever",  {"SEEKER": 2, "REALIST": 1}),
                ("the memory never stops",    {"ROMANTIC": 2}),
            ],
        },
        {
            "text": "how do you know it is real?",
            "answers": [
                ("it changes how the world feels",         {"OPTIMIST": 2, "ROMANTIC": 1}),
                ("it returns even when uncalled",          {"REALIST": 2, "SEEKER": 1}),
                ("it crashes everything that comes after", {"CYNIC": 2, "ROMANTIC": 1}),
            ],
        },
    ],
    # Declaration order matters: ties go to the profile listed first.
    "profiles": [
        {
            "id": "OPTIMIST",
            "name": "The Optimist",
            "subtitle": "brightness: 100%",
            "description": "You lean into hope. You believe love turns gears.",
            "icon": "☀",
            "traits": [{"label": "outlook", "value": "sunny"}, {"label": "battery", "value": "full"}],
        },
        {
            "id": "ROMANTIC",
            "name": "The Romantic",
            "subtitle": "always chasing the spark",
            "description": "You chase the spark. You like the way it glows.",
            "icon": "♥",
        },
        {
            "id": "SEEKER",
            "name": "The Seeker",
            "subtitle": "mapping the stars",
            "description": "Your heart maps constellations to understand the code.",
            "icon": "✦",
        },
        {
            "id": "REALIST",
            "name": "The Realist",
            "subtitle": "feet down, heart online",
            "description": "You keep your feet on the ground and your heart online.",
            "icon": "■",
        },
        {
            "id": "CYNIC",
            "name": "The Cynic",
            "subtitle": "kept the receipt",
            "description": "You have met love before and kept the receipt.",
            "icon": "✕",
        },
    ],
}


def load_quiz(path):
    """Read a quiz document from JSON. Validation happens in QuizEngine."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except ValueError as e:
            raise InvalidConfiguration(f"{path}: not valid JSON ({e})") from e
    if not isinstance(raw, dict):
        raise InvalidConfiguration(f"{path}: top level must be an object")
    return raw
