import json
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from app import FitnessApp
from cli import backup_db, convert, main, restore_db


def run(tmp_path, *args):
    main(["--config", str(tmp_path / "fittrack.yaml"), "--db", str(tmp_path / "cli.db"), *args])


def test_convert(capsys):
    assert convert(20, "kg") == "20 kg = 44.1 lb"
    assert convert(1, "miles") == "1 mi = 1.61 km"
    main(["convert", "--value", "100", "--unit", "lb"])
    assert capsys.readouterr().out.strip() == "100 lb = 45.35 kg"


def test_demo_export_and_import(tmp_path, capsys):
    run(tmp_path, "demo")
    assert "Demo data inserted" in capsys.readouterr().out
    run(tmp_path, "demo")
    assert "already contains workouts" in capsys.readouterr().out

    out = str(tmp_path / "export.json")
    run(tmp_path, "export", "--out", out)
    with open(out, encoding="utf-8") as f:
        data = json.load(f)
    assert len(data["collections"]["workouts"]) == 1
    assert len(data["collections"]["plans"]) == 1

    main(["--config", str(tmp_path / "fittrack.yaml"), "--db", str(tmp_path / "copy.db"), "import", "--in", out])
    copy = FitnessApp(str(tmp_path / "fittrack.yaml"), db_path=str(tmp_path / "copy.db")).init()
    assert copy.workouts.count() == 1
    assert copy.glossary.find_by_term("RPE") is not None


def test_export_single_collection(tmp_path):
    run(tmp_path, "demo")
    out = str(tmp_path / "glossary.json")
    run(tmp_path, "export", "--out", out, "--collection", "glossary")
    with open(out, encoding="utf-8") as f:
        data = json.load(f)
    assert list(data["collections"]) == ["glossary"]


def test_backup_and_restore(tmp_path):
    db_file = str(tmp_path / "cli.db")
    backup = str(tmp_path / "backup.db")
    run(tmp_path, "demo")
    backup_db(db_file, backup)
    os.remove(db_file)
    restore_db(backup, db_file)
    app = FitnessApp(str(tmp_path / "fittrack.yaml"), db_path=db_file).init()
    assert app.workouts.count() == 1
