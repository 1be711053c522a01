"""Domain errors raised by the service layer.

Every error carries the HTTP status the JSON API answers with; blueprints
translate them, services never build responses themselves.
"""


class StorefrontError(Exception):
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class ValidationError(StorefrontError):
    """Bad or missing input, detected before any write."""

    status_code = 400


class InvalidRequest(ValidationError):
    """Upload request missing its product identifier, color or files."""


class NotFound(StorefrontError):
    status_code = 404


class InvalidTransition(StorefrontError):
    """Order status change not allowed from the current status."""

    status_code = 409


class UpstreamFailure(StorefrontError):
    """Database or media store call failed."""

    status_code = 500


class CreateFailed(UpstreamFailure):
    pass


class UploadFailed(UpstreamFailure):
    def __init__(self, color=None, message=None):
        self.color = color
        super().__init__(message or f"UploadFailed: {color}")
