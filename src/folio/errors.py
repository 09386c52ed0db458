"""Error types for the site.

Each error carries a human-readable message plus a ``details`` dict that the
API layer returns alongside the HTTP status noted on the class.
"""


class FolioError(Exception):
    """Base exception for all site errors."""

    status_code = 500

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PostNotFoundError(FolioError):
    """Raised when a requested post does not exist.

    HTTP: 404 Not Found
    """

    status_code = 404

    def __init__(self, post_id: str):
        super().__init__(f"Article with id {post_id} not found", {"post_id": post_id})
        self.post_id = post_id


class CategoryNotFoundError(FolioError):
    """Raised when a requested category does not exist.

    HTTP: 404 Not Found
    """

    status_code = 404

    def __init__(self, category_id: str, available_categories: list = None):
        message = f"Category not found: {category_id}"
        details = {"category_id": category_id}
        if available_categories:
            details["available_categories"] = available_categories
            message += f". Available: {', '.join(available_categories[:5])}"
            if len(available_categories) > 5:
                message += f" (+{len(available_categories) - 5} more)"
        super().__init__(message, details)
        self.category_id = category_id


class SeedDataError(FolioError):
    """Raised when bundled seed content cannot be read or is malformed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Invalid seed data in {path}: {reason}",
            {"path": path, "reason": reason},
        )
        self.path = path


class ThemeNotInitializedError(FolioError):
    """Raised when theme state is read before the controller is initialized.

    This is a programming error: consumers must call ``initialize()`` (or use
    the controller as a context manager) before reading theme state.
    """

    def __init__(self, field: str):
        super().__init__(
            f"Theme controller read before initialize(): {field}",
            {"field": field},
        )
        self.field = field
