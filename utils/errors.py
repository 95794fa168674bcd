"""Error types raised by stores, integrations and auth. The API maps each to its HTTP status."""


class CodeTracError(Exception):
    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message or self.__class__.__name__


class ValidationError(CodeTracError):
    status_code = 400


class UnsupportedPlatform(CodeTracError):
    status_code = 400

    def __init__(self, message: str = "Unsupported platform. Only Codeforces and LeetCode are supported.") -> None:
        super().__init__(message)


class AuthError(CodeTracError):
    status_code = 401


class NotFound(CodeTracError):
    status_code = 404


class UpstreamError(CodeTracError):
    """Judge or identity provider unreachable, or it answered with an error."""

    status_code = 500


class InvalidUrl(UpstreamError):
    """URL names a supported judge but does not match its problem path pattern."""
