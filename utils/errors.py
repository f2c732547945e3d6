class BlogError(Exception):
    """Base exception for failures the app reports as an error page."""

    def __init__(self, message: str, code: str = "INTERNAL_ERROR", http_status: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status


class StorageError(BlogError):
    """The relational store rejected or failed a statement."""

    def __init__(self, message: str):
        super().__init__(message, "STORAGE_ERROR", 500)


class UsernameTakenError(BlogError):
    """Another account already holds this username."""

    def __init__(self, username: str):
        super().__init__(f"Username {username!r} is already taken", "USERNAME_TAKEN", 409)
        self.username = username
