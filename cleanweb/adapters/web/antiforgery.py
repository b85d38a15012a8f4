# cleanweb/adapters/web/antiforgery.py
"""
Antiforgery (CSRF) tokens.

A random *cookie token* is stored in an HttpOnly cookie. Pages and API
clients echo a *request token* (the cookie token signed and timestamped with
itsdangerous) in a form field or a header. A state-mutating request is
accepted only when the request token verifies, is fresh, and carries the
same cookie token the browser sent.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadData, URLSafeTimedSerializer

from cleanweb.adapters.web.errors import AntiforgeryValidationError
from cleanweb.shared.config import Settings

COOKIE_TOKEN_BYTES = 32


@dataclass(frozen=True)
class AntiforgeryTokens:
    """Tokens made available to the current request (``request.state.antiforgery``)."""

    cookie_token: str
    request_token: str
    form_field: str
    header_name: str


class Antiforgery:
    def __init__(
        self,
        secret_key: str,
        *,
        cookie_name: str = "cleanweb.antiforgery",
        form_field: str = "__RequestVerificationToken",
        header_name: str = "X-CSRF-TOKEN",
        max_age: int = 7200,
    ):
        self.cookie_name = cookie_name
        self.form_field = form_field
        self.header_name = header_name
        self.max_age = max_age
        self._serializer = URLSafeTimedSerializer(secret_key, salt="cleanweb.antiforgery")

    @classmethod
    def from_settings(cls, settings: Settings) -> "Antiforgery":
        return cls(
            settings.SECRET_KEY,
            cookie_name=settings.ANTIFORGERY_COOKIE_NAME,
            form_field=settings.ANTIFORGERY_FORM_FIELD,
            header_name=settings.ANTIFORGERY_HEADER_NAME,
            max_age=settings.ANTIFORGERY_TOKEN_MAX_AGE,
        )

    def new_cookie_token(self) -> str:
        return secrets.token_urlsafe(COOKIE_TOKEN_BYTES)

    def is_well_formed(self, cookie_token: Optional[str]) -> bool:
        # token_urlsafe(32) yields 43 characters
        return bool(cookie_token) and len(cookie_token) >= 43

    def tokens_for(self, cookie_token: str) -> AntiforgeryTokens:
        return AntiforgeryTokens(
            cookie_token=cookie_token,
            request_token=self._serializer.dumps(cookie_token),
            form_field=self.form_field,
            header_name=self.header_name,
        )

    def validate(self, cookie_token: Optional[str], request_token: Optional[str]) -> None:
        """
        Raises AntiforgeryValidationError unless ``request_token`` was issued
        for ``cookie_token`` within ``max_age`` seconds.
        """
        if not cookie_token:
            raise AntiforgeryValidationError("The antiforgery cookie is not present.")
        if not request_token:
            raise AntiforgeryValidationError("The antiforgery request token is not present.")

        try:
            issued_for = self._serializer.loads(request_token, max_age=self.max_age)
        except BadData as exc:
            raise AntiforgeryValidationError(f"The antiforgery request token is invalid: {exc}") from exc

        if not isinstance(issued_for, str) or not secrets.compare_digest(issued_for, cookie_token):
            raise AntiforgeryValidationError("The antiforgery cookie token and request token do not match.")
