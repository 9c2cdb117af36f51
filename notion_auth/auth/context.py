from typing import Dict, Optional

from flask import after_this_request, current_app, redirect
from itsdangerous import BadData, URLSafeSerializer


class HttpContext:
    """Per-request view of the inbound Flask request used by the OAuth drivers.

    Cookie writes are queued by name and applied once to the outgoing
    response, so a later write for a cookie replaces an earlier one.
    """

    COOKIE_SALT = 'ally-signed-cookie'

    def __init__(self, request, transport=None):
        self.request = request
        self.transport = transport
        self._cookies: Dict[str, Optional[str]] = {}
        self._hooked = False

    def input(self, name: str, default=None):
        """Read a value from the query string, falling back to the form body."""
        value = self.request.args.get(name)
        if value is None:
            value = self.request.form.get(name)
        return default if value is None else value

    def signed_cookie(self, name: str) -> Optional[str]:
        raw = self.request.cookies.get(name)
        if not raw:
            return None
        try:
            return self._serializer().loads(raw)
        except BadData:
            current_app.logger.warning(f"Ignoring tampered cookie: {name}")
            return None

    def set_signed_cookie(self, name: str, value: str):
        self._queue_cookie(name, self._serializer().dumps(value))

    def clear_cookie(self, name: str):
        if name not in self.request.cookies and name not in self._cookies:
            return
        self._queue_cookie(name, None)

    def redirect(self, url: str):
        return redirect(url)

    def _serializer(self) -> URLSafeSerializer:
        return URLSafeSerializer(current_app.secret_key, salt=self.COOKIE_SALT)

    def _queue_cookie(self, name: str, value: Optional[str]):
        self._cookies[name] = value
        if self._hooked:
            return
        self._hooked = True

        @after_this_request
        def apply_cookies(response):
            secure = current_app.config.get('SESSION_COOKIE_SECURE', False)
            for cookie_name, cookie_value in self._cookies.items():
                if cookie_value is None:
                    response.delete_cookie(cookie_name, httponly=True, secure=secure)
                else:
                    response.set_cookie(
                        cookie_name,
                        cookie_value,
                        httponly=True,
                        secure=secure,
                        samesite='Lax'
                    )
            return response
