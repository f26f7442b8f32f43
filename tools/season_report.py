import os, sys, json, csv, time, argparse

DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data")
STATS = os.path.join(DATA_DIR, "stats_quiz.json")


def load_stats(path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            d = json.load(f)
        return int(d.get("total", 0)), dict(d.get("quizzes", {}))
    except (OSError, ValueError):
        return 0, {}


def summarize(quizzes, quiz_id=None):
    """Rows of (quiz, profile, count, percent), biggest profile first per quiz."""
    rows = []
    for qid in sorted(quizzes):
        if quiz_id is not None and qid != quiz_id:
            continue
        quiz = quizzes[qid]
        completions = int(quiz.get("completions", 0))
        results = quiz.get("results", {})
        for name, n in sorted(results.items(), key=lambda kv: (-kv[1], kv[0])):
            pct = (n / completions * 100) if completions else 0
            rows.append((qid, name, n, round(pct)))
    return rows


def write_csv(rows, out):
    folder = os.path.dirname(out)
    if folder:
        os.makedirs(folder, exist_ok=True)
    with open(out, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["Quiz", "Profile", "Count", "Percent"])
        w.writerows(rows)


def main(argv=None):
    ap = argparse.ArgumentParser(description="Summarise quiz completion stats.")
    ap.add_argument("--stats", default=STATS)
    ap.add_argument("--quiz", default=None, help="only this quiz id")
    ap.add_argument("--out", default=None, help="CSV path (default: data/season_summary_<time>.csv)")
    args = ap.parse_args(argv)

    total, quizzes = load_stats(args.stats)

    print("\n=== PERSONA QUIZ — SEASON SUMMARY ===")
    print(f"Total completed quizzes: {total}")

    rows = summarize(quizzes, args.quiz)
    if not rows:
        print("\n(No profile breakdown found yet. Run some sessions, then retry.)\n")
        return 0

    current = None
    for qid, name, n, pct in rows:
        if qid != current:
            current = qid
            print(f"\n[{qid}] {quizzes[qid].get('completions', 0)} completions")
        print(f"  - {name}: {n}  ({pct}%)")

    out = args.out or os.path.join(DATA_DIR, f"season_summary_{time.strftime('%Y%m%d_%H%M%S')}.csv")
    write_csv(rows, out)
    print(f"\nSaved CSV snapshot: {out}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
