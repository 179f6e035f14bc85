# ABOUTME: Framework-agnostic request protocol consumed by authenticators and guards
# ABOUTME: Lets any web framework's request object be passed to the core through a thin adapter

from typing import Protocol


class AuthRequest(Protocol):
    """
    Protocol for framework-agnostic authentication requests.

    The core never imports a web framework. A boundary adapter wraps the
    framework's request (Starlette, Flask, aiohttp...) so that the
    authenticator can read the ``Authorization`` header and the rate limiter
    can key on the caller.
    """

    def get_header(self, name: str) -> str | None:
        """
        Retrieves the value of a request header.

        Args:
            name: Header name, matched case-insensitively.

        Returns:
            The header value if present, otherwise `None`.
        """
        ...

    @property
    def client_id(self) -> str | None:
        """
        Identifier of the calling client used as the rate-limit key when no
        authenticated subject is available yet (IP address, API key...).
        """
        ...
