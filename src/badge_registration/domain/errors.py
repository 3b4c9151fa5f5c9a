"""Error taxonomy for the registration pipeline."""


class RegistrationError(Exception):
    """Base error carrying a short user-facing message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RegistrationError):
    """Local pre-flight failure; never reaches a remote service."""


class AuthError(RegistrationError):
    """Session or allow-list resolution failed."""


class PersistError(RegistrationError):
    """A registration row could not be read or written."""


class StorageError(RegistrationError):
    """An object storage operation failed."""


class UploadError(StorageError):
    """The photo could not be stored."""


class SigningError(StorageError):
    """A temporary view URL could not be issued for a stored photo."""


class ImageLoadError(RegistrationError):
    """The selected source image could not be decoded."""


class EncodeError(RegistrationError):
    """Encoding the cropped image produced no data."""
