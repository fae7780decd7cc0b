import argparse
import sys
from pathlib import Path

from . import crud
from .db import SessionLocal, init_db
from .errors import RecipeError, ValidationFailed
from .log import setup_logging
from .recipes import import_recipes, load_recipes

DEFAULT_DATA_FILE = Path(__file__).resolve().parent / "data" / "recipes.json"


def _format_recipe(r) -> str:
    star = "*" if r.favorite else " "
    extras = []
    if r.category:
        extras.append(r.category)
    if r.cooking_time:
        extras.append(f"{r.cooking_time} min")
    if r.servings:
        extras.append(f"{r.servings} servings")
    suffix = f" ({', '.join(extras)})" if extras else ""
    return f"{star} {r.id:>4}  {r.name}{suffix}"


def cmd_list(db, args):
    page = crud.list_recipes(
        db,
        q=args.query,
        category=args.category,
        favorites_only=args.favorites,
        page=args.page,
        page_size=args.page_size,
    )
    if not page.items:
        print("No matching recipes found.")
    for r in page.items:
        print(_format_recipe(r))
    print(f"Page {page.page}/{page.pages} ({page.total} recipe(s))")


def cmd_show(db, args):
    r = crud.get_recipe(db, args.id)
    print(_format_recipe(r))
    print("\nIngredients:\n" + r.ingredients)
    print("\nInstructions:\n" + r.instructions)
    if r.image_url:
        print(f"\nImage: {r.image_url}")


def cmd_toggle(db, args):
    favorite = crud.toggle_favorite(db, args.id)
    print(f"Recipe {args.id} favorite: {favorite}")


def cmd_import(db, args):
    records = load_recipes(args.path)
    added, rejected = import_recipes(db, records)
    print(f"Imported {added} recipe(s), rejected {rejected}.")


def cmd_serve(db, args):
    import uvicorn

    uvicorn.run("recipebook.app:app", host=args.host, port=args.port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="recipebook", description="Recipe book")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every store event")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="list recipes")
    p.add_argument("-q", "--query", help="substring of the recipe name")
    p.add_argument("-c", "--category")
    p.add_argument("-f", "--favorites", action="store_true")
    p.add_argument("-p", "--page", type=int, default=1)
    p.add_argument("--page-size", type=int, default=None)
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("show", help="show one recipe")
    p.add_argument("id", type=int)
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("toggle", help="toggle the favorite flag")
    p.add_argument("id", type=int)
    p.set_defaults(func=cmd_toggle)

    p = sub.add_parser("import", help="import recipes from a JSON file")
    p.add_argument("path", nargs="?", default=str(DEFAULT_DATA_FILE))
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("serve", help="run the HTTP API")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv=None, session_factory=None):
    args = build_parser().parse_args(argv)
    setup_logging("INFO" if args.verbose else "WARNING")
    if args.command == "serve":
        return cmd_serve(None, args)

    if session_factory is None:
        init_db()
        session_factory = SessionLocal
    db = session_factory()
    try:
        args.func(db, args)
    except ValidationFailed as exc:
        print(f"Invalid recipe: {exc}", file=sys.stderr)
        return 1
    except RecipeError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
