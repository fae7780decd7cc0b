from typing import Any, Mapping, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from . import models, queries
from .config import get_settings
from .db import storage_errors
from .errors import NotFound, ValidationFailed
from .log import log_event
from .validation import clean_recipe_fields, validate_recipe

EDITABLE_FIELDS = (
    "name",
    "ingredients",
    "instructions",
    "category",
    "cooking_time",
    "servings",
    "favorite",
    "image_url",
)


def _current_fields(db_recipe: models.Recipe):
    return {f: getattr(db_recipe, f) for f in EDITABLE_FIELDS}


def get_recipe(db: Session, recipe_id: int) -> models.Recipe:
    with storage_errors(db):
        db_recipe = db.query(models.Recipe).filter(models.Recipe.id == recipe_id).first()
    if db_recipe is None:
        raise NotFound(recipe_id)
    return db_recipe


def list_recipes(
    db: Session,
    q: Optional[str] = None,
    category: Optional[str] = None,
    favorites_only: bool = False,
    page: int = 1,
    page_size: Optional[int] = None,
) -> queries.Page:
    query = queries.all_recipes(db)
    query = queries.search(query, q)
    query = queries.by_category(query, category)
    if favorites_only:
        query = queries.favorites(query)
    with storage_errors(db):
        return queries.paginate(query, page, page_size or get_settings().PAGE_SIZE)


def create_recipe(db: Session, fields: Mapping[str, Any]) -> models.Recipe:
    errors = validate_recipe(fields)
    if errors:
        log_event("recipe_invalid", action="create", errors=errors)
        raise ValidationFailed(errors)

    db_recipe = models.Recipe(**clean_recipe_fields(fields))
    if db_recipe.favorite is None:
        db_recipe.favorite = False
    with storage_errors(db):
        db.add(db_recipe)
        db.commit()
        db.refresh(db_recipe)
    log_event("recipe_created", id=db_recipe.id, name=db_recipe.name)
    return db_recipe


def update_recipe(db: Session, recipe_id: int, fields: Mapping[str, Any]) -> models.Recipe:
    db_recipe = get_recipe(db, recipe_id)
    changes = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}

    merged = {**_current_fields(db_recipe), **changes}
    errors = validate_recipe(merged)
    if errors:
        log_event("recipe_invalid", action="update", id=recipe_id, errors=errors)
        raise ValidationFailed(errors)

    for key, value in clean_recipe_fields(changes).items():
        setattr(db_recipe, key, value)
    with storage_errors(db):
        db.add(db_recipe)
        db.commit()
        db.refresh(db_recipe)
    log_event("recipe_updated", id=db_recipe.id, fields=sorted(changes))
    return db_recipe


def delete_recipe(db: Session, recipe_id: int) -> None:
    db_recipe = get_recipe(db, recipe_id)
    with storage_errors(db):
        db.delete(db_recipe)
        db.commit()
    log_event("recipe_deleted", id=recipe_id)


def toggle_favorite(db: Session, recipe_id: int) -> bool:
    """Flip the favorite flag in one UPDATE and return the new value.

    Other fields are not revalidated.
    """
    stmt = (
        update(models.Recipe)
        .where(models.Recipe.id == recipe_id)
        .values(favorite=~models.Recipe.favorite)
        .returning(models.Recipe.favorite)
        .execution_options(synchronize_session=False)
    )
    with storage_errors(db):
        # flip and read back in the same statement
        favorite = db.execute(stmt).scalar_one_or_none()
        if favorite is None:
            db.rollback()
            raise NotFound(recipe_id)
        db.commit()
    log_event("recipe_favorite_toggled", id=recipe_id, favorite=favorite)
    return favorite
