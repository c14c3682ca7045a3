"""Time-boxed HMAC request signing for providers that require it.

The signed string is the request path plus its canonical query followed by
the decimal expiry timestamp. The provider recomputes the same HMAC from the
``EXPIRES`` header it receives, so the expiry that was signed and the one
transmitted must come from the same :class:`SignedRequestContext`.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import time
from dataclasses import dataclass
from typing import Callable, Dict

SIGNATURE_TTL = 300
DEMO_USER_ID = "demo_user"
SEARCH_PATH = "/api/v2/images/search"


def sign(canonical_path: str, expires: int, secret: str) -> str:
    """Return the lowercase hex HMAC-SHA256 of ``canonical_path + expires``."""

    message = f"{canonical_path}{int(expires)}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def canonical_path(project_id: str, keywords: str, user_id: str = DEMO_USER_ID) -> str:
    # Parameter order and the unescaped keywords match the provider's own canonical form.
    return f"{SEARCH_PATH}?project_id={project_id}&user_id={user_id}&keywords={keywords}"


def basic_auth_header(public_key: str, private_key: str) -> str:
    token = base64.b64encode(f"{public_key}:{private_key}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


@dataclass(frozen=True)
class SignedRequestContext:
    """Signature material for exactly one outbound call."""

    canonical_path: str
    expires: int
    signature: str

    @classmethod
    def create(
        cls,
        canonical_path: str,
        secret: str,
        clock: Callable[[], float] = time.time,
    ) -> "SignedRequestContext":
        expires = int(clock()) + SIGNATURE_TTL
        return cls(
            canonical_path=canonical_path,
            expires=expires,
            signature=sign(canonical_path, expires, secret),
        )

    def headers(self) -> Dict[str, str]:
        return {"EXPIRES": str(self.expires), "HMAC": self.signature}
