class RecipeError(Exception):
    """Base class for recipe store errors."""


class ValidationFailed(RecipeError):
    """Raised on create/update when field values are invalid.

    ``errors`` maps each failing field to its ordered list of reasons.
    """

    def __init__(self, errors):
        self.errors = {field: list(reasons) for field, reasons in errors.items()}
        super().__init__(
            "; ".join(
                f"{field} {reason}"
                for field, reasons in self.errors.items()
                for reason in reasons
            )
        )


class NotFound(RecipeError):
    def __init__(self, recipe_id):
        self.recipe_id = recipe_id
        super().__init__(f"Recipe {recipe_id} not found")


class StorageUnavailable(RecipeError):
    """The backing database could not be reached."""
