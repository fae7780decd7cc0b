from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import validates

from .db import Base


class Recipe(Base):
    __tablename__ = "recipes"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    # lower-cased copy of name used for case-insensitive search
    normalized_name = Column(String(255), nullable=False, index=True)
    ingredients = Column(Text, nullable=False)
    instructions = Column(Text, nullable=False)
    category = Column(String(50), nullable=True, index=True)
    cooking_time = Column(Integer, nullable=True)  # minutes
    servings = Column(Integer, nullable=True)
    favorite = Column(Boolean, nullable=False, default=False, index=True)
    image_url = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    @validates("name")
    def _sync_normalized_name(self, key, value):
        self.normalized_name = normalize_name(value)
        return value

    def __repr__(self):
        return f"<Recipe id={self.id} name={self.name!r}>"


def normalize_name(value):
    return (value or "").lower()
