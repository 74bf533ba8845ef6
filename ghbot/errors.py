"""Failures reported by the GitHub gateway."""


class GatewayError(Exception):
    """Talking to GitHub failed."""


class AuthError(GatewayError):
    """The token is missing, invalid or expired."""


class TransientError(GatewayError):
    """Network trouble, rate limiting or GitHub having a bad day."""


class NotFoundError(GatewayError):
    """The requested resource does not exist (anymore)."""
