import argparse
import datetime
import json
import shutil
import time

import requests

from logger import setup_logger
from seed_sample_data import seed
from rest_api import TrackerAPI


def export_history(db_path: str, yaml_path: str, output: str) -> int:
    """Write all completed sessions to a JSON file and return the count."""
    api = TrackerAPI(db_path=db_path, yaml_path=yaml_path)
    logs = [log.model_dump() for log in api.history.completed_logs()]
    with open(output, "w", encoding="utf-8") as f:
        json.dump(logs, f, indent=2)
    return len(logs)


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def benchmark(url: str, runs: int = 10) -> None:
    times: list[float] = []
    for _ in range(runs):
        t0 = time.time()
        requests.get(f"{url}/health", timeout=5)
        times.append(time.time() - t0)
    avg = sum(times) / len(times)
    print(f"Average /health response time over {runs} runs: {avg:.4f}s")


def recommend(db_path: str, yaml_path: str, count: int, mood: str | None) -> None:
    api = TrackerAPI(db_path=db_path, yaml_path=yaml_path)
    for workout in api.recommender.get_recommended_workouts(count, mood):
        print(f"{workout.id}\t{workout.name} ({workout.category}, {workout.effective_duration()} min)")
    if mood == "rest":
        for activity in api.recommender.get_rest_day_activities():
            print(f"- {activity}")


def show_schedule(db_path: str, yaml_path: str, date: str | None) -> None:
    api = TrackerAPI(db_path=db_path, yaml_path=yaml_path)
    day = datetime.date.fromisoformat(date) if date else datetime.date.today()
    for entry in api.planner.get_scheduled_workouts_for_date(day):
        workout = api.catalog.get_workout(entry.workout_id)
        name = workout.name if workout else entry.workout_id
        print(f"{entry.time}\t{name} ({entry.schedule_type})")


def main() -> None:
    parser = argparse.ArgumentParser(description="Utility commands")
    parser.add_argument("--log-level", default="INFO")
    sub = parser.add_subparsers(dest="cmd", required=True)

    exp = sub.add_parser("export")
    exp.add_argument("--db", default="workout.db")
    exp.add_argument("--yaml", default="settings.yaml")
    exp.add_argument("--out", default="history.json")

    bkp = sub.add_parser("backup")
    bkp.add_argument("--db", default="workout.db")
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")
    rst.add_argument("--db", default="workout.db")

    demo = sub.add_parser("demo")
    demo.add_argument("--db", default="workout.db")

    bench = sub.add_parser("benchmark")
    bench.add_argument("--url", default="http://localhost:8000")
    bench.add_argument("--runs", type=int, default=10)

    rec = sub.add_parser("recommend")
    rec.add_argument("--db", default="workout.db")
    rec.add_argument("--yaml", default="settings.yaml")
    rec.add_argument("--count", type=int, default=3)
    rec.add_argument(
        "--mood", choices=["shorter", "light", "rest", "energetic", "general"]
    )

    sched = sub.add_parser("schedule")
    sched.add_argument("--db", default="workout.db")
    sched.add_argument("--yaml", default="settings.yaml")
    sched.add_argument("--date")

    args = parser.parse_args()
    setup_logger(level=args.log_level)

    if args.cmd == "export":
        count = export_history(args.db, args.yaml, args.out)
        print(f"Exported {count} workouts to {args.out}")
    elif args.cmd == "backup":
        backup_db(args.db, args.out)
    elif args.cmd == "restore":
        restore_db(args.src, args.db)
    elif args.cmd == "demo":
        seed(args.db)
    elif args.cmd == "benchmark":
        benchmark(args.url, args.runs)
    elif args.cmd == "recommend":
        recommend(args.db, args.yaml, args.count, args.mood)
    elif args.cmd == "schedule":
        show_schedule(args.db, args.yaml, args.date)


if __name__ == "__main__":
    main()
