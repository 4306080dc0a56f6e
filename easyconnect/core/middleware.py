"""
ASGI middleware shared by every route
"""

from typing import List, Tuple

SECURITY_HEADERS: List[Tuple[bytes, bytes]] = [
    (b"X-Content-Type-Options", b"nosniff"),
    (b"X-Frame-Options", b"DENY"),
    (b"X-XSS-Protection", b"1; mode=block"),
]


class SecurityHeadersMiddleware:
    def __init__(self, app, headers: List[Tuple[bytes, bytes]] = None):
        self.app = app
        self.headers = headers or SECURITY_HEADERS

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                existing = {name.lower() for name, _ in message.get("headers", [])}
                message["headers"] = list(message.get("headers", [])) + [
                    (name, value) for name, value in self.headers if name.lower() not in existing
                ]
            await send(message)

        await self.app(scope, receive, send_with_headers)
