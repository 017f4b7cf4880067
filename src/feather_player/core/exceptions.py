"""Application-wide exceptions."""


class FeatherError(Exception):
    """Base exception for Feather."""

    pass


class UserInputError(FeatherError):
    """Raised when user-supplied input is rejected."""

    pass


class EmptyNameError(UserInputError):
    """Raised when a playlist name is empty after trimming."""

    def __init__(self, message: str = "Playlist name cannot be empty"):
        super().__init__(message)


class DuplicateNameError(UserInputError):
    """Raised when a playlist with the same name already exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Playlist '{name}' already exists")


class PlaylistNotFoundError(UserInputError):
    """Raised when a named playlist does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Playlist '{name}' not found")


class PersistenceError(FeatherError):
    """Raised when the local database cannot complete an operation."""

    pass
