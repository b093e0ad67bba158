"""Custom exception classes for the Drive application."""


class DriveException(Exception):
    """
    Base exception class for all Drive errors.
    """
    pass


class ValidationError(DriveException):
    """
    Raised when a required input is missing or empty.
    """
    pass


class InvalidIdError(ValidationError):
    """
    Raised when a folder or file id in a URL is malformed.
    """
    pass


class DuplicateUsernameError(DriveException):
    """
    Raised when attempting to register a username that already exists.
    """
    pass


class DuplicateNameError(DriveException):
    """
    Raised when a folder or file name collides with a sibling.
    """
    pass


class NotFoundError(DriveException):
    """
    Raised when a folder or file does not exist or is not owned by the caller.
    """
    pass


class FolderNotFoundError(NotFoundError):
    """
    Raised when the target folder of a file does not exist for the owner.
    """
    pass


class ParentNotFoundError(NotFoundError):
    """
    Raised when the parent of a new folder does not exist for the owner.
    """
    pass


class HasChildrenError(DriveException):
    """
    Raised when deleting a folder that still has subfolders.
    """
    pass


class FileTooLargeError(DriveException):
    """
    Raised when an upload exceeds the configured size limit.
    """

    def __init__(self, max_bytes: int) -> None:
        self.max_bytes = max_bytes
        super().__init__(f"File exceeds the maximum upload size of {max_bytes} bytes")


class StorageIOError(DriveException):
    """
    Raised when writing or removing a blob on disk fails.
    """
    pass


class NotAuthenticatedError(DriveException):
    """
    Raised when a protected route is requested without a valid session.
    """
    pass
