import runpy
import sqlite3
from contextlib import closing
from pathlib import Path

from skillfolio.models import Badge, Course, LearningModule, User
from skillfolio.seed import BADGES, COURSE

BACKUP_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "backup_databases.py"


def test_seed_command_is_idempotent(app):
    runner = app.test_cli_runner()
    args = ["seed", "--admin-email", "owner@example.com", "--admin-password", "ownerpass1"]

    first = runner.invoke(args=args)
    assert first.exit_code == 0, first.output
    assert f"Badges added: {len(BADGES)}" in first.output
    assert f"Course added: {COURSE['title']}" in first.output
    assert "Admin account: owner@example.com" in first.output

    second = runner.invoke(args=args)
    assert second.exit_code == 0, second.output
    assert "Badges added: 0" in second.output
    assert "Course added: already present" in second.output
    assert "Admin account: already present" in second.output

    with app.app_context():
        assert Badge.query.count() == len(BADGES)
        assert Course.query.count() == 1
        assert LearningModule.query.count() == len(COURSE["modules"])
        admin = User.query.filter_by(email="owner@example.com").one()
        assert admin.is_admin is True


def test_seeded_admin_can_log_in(app, client):
    runner = app.test_cli_runner()
    runner.invoke(args=["seed", "--admin-email", "owner@example.com", "--admin-password", "ownerpass1"])

    resp = client.post("/api/auth/login", json={"email": "owner@example.com", "password": "ownerpass1"})
    assert resp.status_code == 200
    assert client.get("/api/admin/stats").status_code == 200


def test_prune_backups_keeps_newest_folders(tmp_path):
    backup = runpy.run_path(str(BACKUP_SCRIPT))
    for stamp in ("20260101_000000", "20260102_000000", "20260103_000000"):
        folder = tmp_path / f"backup_{stamp}"
        folder.mkdir()
        (folder / "app.db").write_bytes(b"")
    (tmp_path / "notes").mkdir()

    removed = backup["prune_backups"](tmp_path, keep=2)

    assert [folder.name for folder in removed] == ["backup_20260101_000000"]
    assert sorted(path.name for path in tmp_path.iterdir()) == [
        "backup_20260102_000000",
        "backup_20260103_000000",
        "notes",
    ]


def test_backup_database_copies_rows(tmp_path):
    backup = runpy.run_path(str(BACKUP_SCRIPT))
    source = tmp_path / "app.db"
    with closing(sqlite3.connect(source)) as conn:
        conn.execute("CREATE TABLE items (name TEXT)")
        conn.execute("INSERT INTO items VALUES ('pandas')")
        conn.commit()

    target = tmp_path / "copy.db"
    backup["backup_database"](source, target)

    with closing(sqlite3.connect(target)) as conn:
        assert conn.execute("SELECT name FROM items").fetchall() == [("pandas",)]
