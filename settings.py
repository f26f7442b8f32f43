# settings.py
# Environment switches for the quiz kiosk. argv wins over env where both exist.
import os, sys

from quiz_stats import STATS_PATH

DEFAULT_CANVAS = (960, 720)
DEFAULT_FONT_SIZE = 28
DEFAULT_AUTO_ADVANCE_MS = 800


def get_env_flag(name, default=False, environ=None):
    env = os.environ if environ is None else environ
    v = (env.get(name) or "").strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return bool(default)


def get_env_int(name, default, environ=None):
    env = os.environ if environ is None else environ
    try:
        return int((env.get(name) or "").strip())
    except ValueError:
        return default


def parse_canvas(value, default=DEFAULT_CANVAS):
    value = (value or "").lower()
    if "x" not in value:
        return default
    try:
        w, h = value.split("x")
        w, h = int(w), int(h)
    except ValueError:
        return default
    if w <= 0 or h <= 0:
        return default
    return w, h


def _argv_value(argv, flag):
    if flag in argv:
        i = argv.index(flag)
        if i + 1 < len(argv):
            return argv[i + 1]
    return None


def load_settings(argv=None, environ=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    env = os.environ if environ is None else environ

    return {
        "windowed": get_env_flag("PQ_WINDOWED", False, env) or ("--windowed" in argv),
        "canvas": parse_canvas(env.get("PQ_CANVAS")),
        "font_size": get_env_int("PQ_FONT", DEFAULT_FONT_SIZE, env),
        "quiz_path": _argv_value(argv, "--quiz") or env.get("PQ_QUIZ") or None,
        "stats_path": env.get("PQ_STATS") or STATS_PATH,
        "auto_advance_ms": max(0, get_env_int("PQ_AUTO_ADVANCE_MS", DEFAULT_AUTO_ADVANCE_MS, env)),
        "strict": get_env_flag("PQ_STRICT", True, env),
    }
