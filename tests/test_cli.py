# flake8: noqa
import json
import sys
from pathlib import Path

# Ensure project root is on sys.path so `recipebook` can be imported when tests are run
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from recipebook import models
from recipebook.main import DEFAULT_DATA_FILE, main


engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DATA_FILE = Path(__file__).resolve().parent.parent / "recipebook" / "data" / "recipes.json"


def setup_function():
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)


def run(*argv):
    return main(list(argv), session_factory=TestingSessionLocal)


def test_import_and_list(capsys):
    assert run("import", str(DATA_FILE)) == 0
    assert "Imported 3 recipe(s), rejected 0." in capsys.readouterr().out

    assert run("list", "--query", "カレー") == 0
    out = capsys.readouterr().out
    assert "カレーライス" in out
    assert "ハンバーグ" not in out
    assert "(1 recipe(s))" in out

    assert run("list", "--favorites") == 0
    out = capsys.readouterr().out
    assert "ハンバーグ" in out and "チャーハン" in out
    assert "カレーライス" not in out


def test_import_skips_invalid_records(tmp_path, capsys):
    path = tmp_path / "recipes.json"
    path.write_text(json.dumps([
        {"name": "OK", "ingredients": "a", "instructions": "b"},
        {"name": "", "ingredients": "a", "instructions": "b"},
        {"name": "Bad servings", "ingredients": "a", "instructions": "b", "servings": 0},
    ]), encoding="utf-8")
    assert run("import", str(path)) == 0
    assert "Imported 1 recipe(s), rejected 2." in capsys.readouterr().out


def test_show_and_toggle(capsys):
    run("import", str(DATA_FILE))
    capsys.readouterr()

    assert run("show", "1") == 0
    out = capsys.readouterr().out
    assert "カレーライス" in out and "Ingredients:" in out

    assert run("toggle", "1") == 0
    assert "favorite: True" in capsys.readouterr().out
    assert run("toggle", "1") == 0
    assert "favorite: False" in capsys.readouterr().out


def test_missing_recipe_exits_nonzero(capsys):
    assert run("show", "42") == 1
    assert "Recipe 42 not found" in capsys.readouterr().err


def test_empty_listing(capsys):
    assert run("list", "--category", "その他") == 0
    assert "No matching recipes found." in capsys.readouterr().out


def test_import_defaults_to_bundled_data(capsys):
    assert DEFAULT_DATA_FILE.parent.parent == Path(__file__).resolve().parent.parent / "recipebook"
    assert DEFAULT_DATA_FILE.exists()
    assert run("import") == 0
    assert "Imported 3 recipe(s), rejected 0." in capsys.readouterr().out
