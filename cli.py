import argparse
import datetime
import logging
import shutil
from typing import Optional

from algorithms import UnitConverter
from app import FitnessApp
from db import COLLECTIONS, export_collections, import_collections
from models import PerformedSet, StrengthEntry, WorkoutLogEntry
from seed_sample_data import seed


def export_data(app: FitnessApp, out_path: str, collections: Optional[list[str]] = None) -> None:
    data = export_collections(app.store, collections)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(data)


def import_data(app: FitnessApp, in_path: str, replace: bool = True) -> dict[str, int]:
    with open(in_path, "r", encoding="utf-8") as f:
        payload = f.read()
    return import_collections(app.store, payload, replace=replace)


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def demo_data(app: FitnessApp) -> None:
    """Populate the database with starter data and one demo workout."""
    seed(app)
    if app.workouts.count():
        print("Database already contains workouts")
        return
    today = datetime.date.today().isoformat()
    workout = WorkoutLogEntry(
        date_time_start=f"{today}T08:00:00+00:00",
        date_time_end=f"{today}T08:45:00+00:00",
        session_title="Demo session",
        overall_rating=4,
        entries=[
            StrengthEntry(
                exercise_id="goblet-squat",
                exercise_name="Goblet Squat",
                performed_sets=[
                    PerformedSet(set_number=1, repetitions_done=10, weight_value=25, weight_unit="lb"),
                    PerformedSet(set_number=2, repetitions_done=8, weight_value=30, weight_unit="lb"),
                ],
            )
        ],
    )
    app.workouts.save(workout)
    print("Demo data inserted")


CONVERSIONS = {
    "kg": ("kg", "lb", UnitConverter.kg_to_pounds),
    "lb": ("lb", "kg", UnitConverter.pounds_to_kg),
    "miles": ("mi", "km", UnitConverter.miles_to_km),
    "km": ("km", "mi", UnitConverter.km_to_miles),
}


def convert(value: float, unit: str) -> str:
    source, target, func = CONVERSIONS[unit]
    result = UnitConverter.format_number(func(value))
    return f"{UnitConverter.format_number(value)} {source} = {result} {target}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fitness tracker utility commands")
    parser.add_argument("--config", default="fittrack.yaml")
    parser.add_argument("--db", default=None, help="override the configured database path")
    sub = parser.add_subparsers(dest="cmd", required=True)

    exp = sub.add_parser("export")
    exp.add_argument("--out", default="fittrack-export.json")
    exp.add_argument("--collection", action="append", choices=COLLECTIONS, dest="collections")

    imp = sub.add_parser("import")
    imp.add_argument("--in", dest="src", default="fittrack-export.json")
    imp.add_argument("--merge", action="store_true", help="keep existing documents")

    bkp = sub.add_parser("backup")
    bkp.add_argument("--out", default="fittrack-backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="fittrack-backup.db")

    sub.add_parser("demo")

    conv = sub.add_parser("convert")
    conv.add_argument("--value", type=float, required=True)
    conv.add_argument("--unit", choices=sorted(CONVERSIONS), required=True)
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    if args.cmd == "convert":
        print(convert(args.value, args.unit))
        return

    app = FitnessApp(args.config, db_path=args.db).init()
    logging.basicConfig(
        level=getattr(logging, app.config.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "export":
        export_data(app, args.out, args.collections)
    elif args.cmd == "import":
        counts = import_data(app, args.src, replace=not args.merge)
        for name, count in counts.items():
            print(f"{name}: {count}")
    elif args.cmd == "backup":
        backup_db(app.config.db_path, args.out)
    elif args.cmd == "restore":
        restore_db(args.src, app.config.db_path)
    elif args.cmd == "demo":
        demo_data(app)


if __name__ == "__main__":
    main()
