# quiz_stats.py
# Local completion stats: how many people finished each quiz and which
# profile they landed on. One JSON file, shared by every quiz.
import os, json, threading

# Resolve project root based on this file’s location
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(PROJECT_ROOT, "data")
STATS_PATH = os.path.join(DATA_DIR, "stats_quiz.json")


def _empty_stats():
    return {"total": 0, "quizzes": {}}


class QuizStats:
    def __init__(self, path=STATS_PATH):
        self.path = path
        self._lock = threading.Lock()
        self._threads = []

    def _ensure_stats_file(self):
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        if not os.path.exists(self.path):
            self._save(_empty_stats())

    def _read(self):
        with open(self.path, "r", encoding="utf-8") as f:
            stats = json.load(f)
        if not isinstance(stats, dict) or not isinstance(stats.get("quizzes", {}), dict):
            raise ValueError("expected an object with a \"quizzes\" object")
        stats.setdefault("total", 0)
        stats.setdefault("quizzes", {})
        return stats

    def load(self):
        self._ensure_stats_file()
        try:
            return self._read()
        except ValueError as e:
            print(f"[WARN] {self.path} is unreadable ({e}); starting fresh.")
            return _empty_stats()

    def _save(self, stats):
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(stats, f, indent=2)
        os.replace(tmp, self.path)

    def record(self, quiz_id, profile_id):
        """
        Tally one completion. Returns (percent_same_result, counts, completions)
        where percent is the share of this quiz's takers with the same profile.
        """
        key = str(quiz_id)
        with self._lock:
            stats = self.load()
            quiz = stats["quizzes"].setdefault(key, {"completions": 0, "results": {}})
            results = quiz.setdefault("results", {})
            results[profile_id] = results.get(profile_id, 0) + 1
            quiz["completions"] = quiz.get("completions", 0) + 1
            stats["total"] = stats.get("total", 0) + 1
            self._save(stats)

        completions = max(quiz["completions"], 1)
        pct = round(results[profile_id] * 100 / completions)
        return pct, dict(results), quiz["completions"]

    def percent_for(self, quiz_id, profile_id):
        """Read-only lookup. None when the stats file can't be used."""
        try:
            if not os.path.exists(self.path):
                return 0
            quiz = self._read()["quizzes"].get(str(quiz_id))
            if not quiz or not quiz.get("completions"):
                return 0
            return round(quiz.get("results", {}).get(profile_id, 0) * 100 / quiz["completions"])
        except (OSError, ValueError, AttributeError, TypeError) as e:
            print(f"[WARN] Could not read stats from {self.path}: {e}")
            return None

    # ---------- Engine reporter hook ----------
    def report(self, payload):
        """Fire-and-forget: write on a background thread, never block the quiz."""
        t = threading.Thread(target=self._report_worker, args=(payload,), daemon=True)
        self._threads = [th for th in self._threads if th.is_alive()]
        self._threads.append(t)
        t.start()

    def _report_worker(self, payload):
        try:
            pct, _counts, total = self.record(payload["quiz_id"], payload["winning_profile_id"])
            print(f"[stats] {payload['winning_profile_id']}: {pct}% of {total} for {payload['quiz_id']}")
        except Exception as e:
            print(f"[WARN] Could not save stats to {self.path}: {e}")

    @property
    def busy(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def wait(self, timeout=2.0):
        for t in list(self._threads):
            t.join(timeout=timeout)
        self._threads = [t for t in self._threads if t.is_alive()]
