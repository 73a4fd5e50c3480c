"""
Error types shared by the auth core, the stores and the relay.

Each error carries a machine ``code``, the HTTP status it maps to and the
detail string that is safe to show a client.
"""
from typing import Optional

from fastapi import status


class EchoesError(Exception):
    code = "echoes_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.detail)


class ConfigError(EchoesError):
    code = "config_error"
    detail = "Service is not configured"


class MissingSecret(ConfigError):
    code = "missing_secret"
    detail = "JWT_SECRET is not set"


class HashingError(EchoesError):
    code = "hashing_error"
    detail = "Failed to hash password"


class TokenError(EchoesError):
    code = "token_error"
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid token"


class MalformedToken(TokenError):
    code = "malformed_token"


class InvalidSignature(TokenError):
    code = "invalid_signature"


class TokenExpired(TokenError):
    code = "token_expired"


class GateError(EchoesError):
    code = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Unauthorized"


class AuthorizationHeaderMissing(GateError):
    code = "authorization_header_missing"
    detail = "Authorization header is required"


class InvalidAuthorizationFormat(GateError):
    code = "invalid_authorization_format"
    detail = "Invalid authorization format"


class InvalidToken(GateError):
    code = "invalid_token"
    detail = "Invalid token"


class DuplicateUsername(EchoesError):
    code = "duplicate_username"
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Username already exists"


class CompletionError(EchoesError):
    code = "completion_error"
    status_code = status.HTTP_502_BAD_GATEWAY
    detail = "Failed to get reply"
