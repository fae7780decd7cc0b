"""Field rules for recipes.

``validate_recipe`` never raises and never touches the database: it maps a
candidate field set to ``{field: [reasons]}``, empty when the recipe is
valid. Every rule runs, so independent failures are all reported.
"""
import numbers
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .config import get_settings

BLANK = "can't be blank"
TOO_LONG = "is too long (maximum is {count} characters)"
NOT_A_NUMBER = "is not a number"
NOT_AN_INTEGER = "must be an integer"
NOT_POSITIVE = "must be greater than 0"
NOT_INCLUDED = "is not included in the list"
INVALID = "is invalid"

REQUIRED_FIELDS = ("name", "ingredients", "instructions")
COUNT_FIELDS = ("cooking_time", "servings")
OPTIONAL_TEXT_FIELDS = ("category", "image_url")

_INT_RE = re.compile(r"^[+-]?\d+$")
_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _count_errors(value: Any) -> List[str]:
    # bool is an int subclass but never a count
    if isinstance(value, bool):
        return [NOT_A_NUMBER]
    if isinstance(value, str):
        text = value.strip()
        if _INT_RE.match(text):
            value = int(text)
        elif _NUMBER_RE.match(text):
            return [NOT_AN_INTEGER]
        else:
            return [NOT_A_NUMBER]
    if not isinstance(value, numbers.Number):
        return [NOT_A_NUMBER]
    # 30.0 is rejected too; only integral types count
    if not isinstance(value, numbers.Integral):
        return [NOT_AN_INTEGER]
    if value <= 0:
        return [NOT_POSITIVE]
    return []


def validate_recipe(
    fields: Mapping[str, Any],
    categories: Optional[Iterable[str]] = None,
    name_max_length: Optional[int] = None,
) -> Dict[str, List[str]]:
    settings = get_settings()
    if categories is None:
        categories = settings.RECIPE_CATEGORIES
    if name_max_length is None:
        name_max_length = settings.NAME_MAX_LENGTH

    errors: Dict[str, List[str]] = {}

    def add(field, reason):
        errors.setdefault(field, []).append(reason)

    for field in REQUIRED_FIELDS:
        value = fields.get(field)
        if is_blank(value):
            add(field, BLANK)
        elif not isinstance(value, str):
            add(field, INVALID)

    name = fields.get("name")
    if isinstance(name, str) and len(name) > name_max_length:
        add("name", TOO_LONG.format(count=name_max_length))

    for field in COUNT_FIELDS:
        value = fields.get(field)
        if value is None or value == "":
            continue
        for reason in _count_errors(value):
            add(field, reason)

    category = fields.get("category")
    if category not in (None, ""):
        if not isinstance(category, str):
            add("category", INVALID)
        elif category not in list(categories):
            add("category", NOT_INCLUDED)

    image_url = fields.get("image_url")
    if image_url is not None and not isinstance(image_url, str):
        add("image_url", INVALID)

    # null means "leave as is"; anything else must be a real boolean
    favorite = fields.get("favorite")
    if favorite is not None and not isinstance(favorite, bool):
        add("favorite", INVALID)

    return errors


def clean_recipe_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert validated input into column values.

    Integer strings from form posts become ints and empty optional values
    become None. Unknown keys are dropped.
    """
    cleaned: Dict[str, Any] = {}
    for field in REQUIRED_FIELDS:
        if field in fields:
            cleaned[field] = fields[field]
    for field in COUNT_FIELDS:
        if field in fields:
            value = fields[field]
            if value is None or value == "":
                cleaned[field] = None
            else:
                cleaned[field] = int(value.strip()) if isinstance(value, str) else int(value)
    for field in OPTIONAL_TEXT_FIELDS:
        if field in fields:
            cleaned[field] = fields[field] or None
    if fields.get("favorite") is not None:
        cleaned["favorite"] = fields["favorite"]
    return cleaned
