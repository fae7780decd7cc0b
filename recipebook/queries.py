"""Composable recipe filters.

Each filter takes a SQLAlchemy ``Query`` and returns a narrowed one, so they
chain in any order: ``favorites(by_category(search(q, "カレー"), "和食"))``.
Nothing is executed until the query is iterated or paginated.
"""
import math
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Query, Session

from .models import Recipe, normalize_name


def all_recipes(db: Session) -> Query:
    return db.query(Recipe)


def search(query: Query, text: Optional[str]) -> Query:
    """Case-insensitive substring match on the recipe name.

    The text is bound as a parameter with LIKE wildcards escaped, so it is
    always matched literally. Empty text leaves the query unchanged.
    """
    if not text:
        return query
    return query.filter(Recipe.normalized_name.contains(normalize_name(text), autoescape=True))


def by_category(query: Query, category: Optional[str]) -> Query:
    if not category:
        return query
    return query.filter(Recipe.category == category)


def favorites(query: Query) -> Query:
    return query.filter(Recipe.favorite.is_(True))


@dataclass
class Page:
    items: List[Recipe] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 10

    @property
    def pages(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages


def paginate(query: Query, page: int = 1, page_size: int = 10) -> Page:
    """Return one page of ``query`` ordered by id.

    Pages start at 1; anything lower is treated as 1. A page past the end
    is empty rather than an error.
    """
    page = max(1, int(page or 1))
    if not page_size or page_size < 1:
        page_size = 10

    total = query.order_by(None).count()
    items = (
        query.order_by(Recipe.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return Page(items=items, total=total, page=page, page_size=page_size)
