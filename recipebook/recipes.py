import json
from pathlib import Path

from .crud import create_recipe
from .errors import ValidationFailed
from .log import log_event


def load_recipes(path):
    """Load recipes from a JSON file and return a list of dicts.

    Args:
        path (str or Path): Path to the JSON file.

    Returns:
        list: list of recipe dictionaries.
    """
    p = Path(path)
    if not p.exists():
        return []
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def import_recipes(db, records):
    """Create every valid record; return (added, rejected) counts.

    Invalid records are logged and skipped.
    """
    added = rejected = 0
    for index, record in enumerate(records):
        try:
            create_recipe(db, record)
        except ValidationFailed as exc:
            rejected += 1
            log_event("import_rejected", index=index, name=record.get("name"), errors=exc.errors)
            continue
        added += 1
    return added, rejected
