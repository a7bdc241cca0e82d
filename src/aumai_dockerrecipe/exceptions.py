"""Custom exceptions for aumai-dockerrecipe."""


class RecipeError(Exception):
    """Base exception for all recipe-related errors."""

    pass


class HistoryFetchError(RecipeError):
    """Raised when the container engine cannot provide an image's history or config."""

    pass


class RecipeWriteError(RecipeError):
    """Raised when a recipe cannot be written to its destination."""

    pass
