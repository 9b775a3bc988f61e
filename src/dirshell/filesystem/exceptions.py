"""
Exceptions for sandboxed filesystem operations.

Each exception carries the HTTP status a raw download/static endpoint
should answer with when the condition reaches it.
"""


class FileSystemError(Exception):
    """Base exception for filesystem operations."""

    http_status = 500


class FileAccessDeniedError(FileSystemError):
    """Raised when a path would escape the sandbox root."""

    http_status = 403

    def __init__(self, path: str, reason: str = "permission denied"):
        self.path = path
        self.reason = reason
        super().__init__(reason)


class EntryNotFoundError(FileSystemError):
    """Raised when a virtual path does not exist."""

    http_status = 404

    def __init__(self, path: str, reason: str = "no such file or directory"):
        self.path = path
        self.reason = reason
        super().__init__(reason)


class NotADirectoryPathError(FileSystemError):
    """Raised when a directory was required."""

    http_status = 400

    def __init__(self, path: str):
        self.path = path
        super().__init__("not a directory")


class IsADirectoryPathError(FileSystemError):
    """Raised when a regular file was required."""

    http_status = 400

    def __init__(self, path: str):
        self.path = path
        super().__init__("is a directory")


class FileSizeLimitExceededError(FileSystemError):
    """Raised when a file exceeds a content cap."""

    def __init__(self, path: str, size: int, limit: int):
        self.path = path
        self.size = size
        self.limit = limit
        super().__init__(f"file too large ({size} > limit {limit})")


class BinaryContentError(FileSystemError):
    """Raised when content is classified as binary."""

    def __init__(self, path: str):
        self.path = path
        super().__init__("binary file (skipping)")


class InvalidArgumentError(FileSystemError):
    """Raised for bad flags, patterns or filters."""

    http_status = 400


class NoMatchError(FileSystemError):
    """Raised when a search or download resolves to nothing."""

    http_status = 404


class CommandNotFoundError(FileSystemError):
    """Raised when a command name is not registered."""

    http_status = 404

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name}: command not found")
