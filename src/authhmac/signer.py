"""
HMAC request signing and verification.

Signing adds an Authorization header in the format::

    <service_id> <access_key_id>:<signature>

where <signature> is the Base64 encoded HMAC-SHA1 of the canonical string
keyed by the secret. Loosely based on the AWS S3 REST authentication
scheme, generalized for any application and without the Amazon extension
headers.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import re
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from authhmac import canonical
from authhmac.credentials import CredentialStore, Secret, credential_store
from authhmac.errors import UnknownCredential
from authhmac.logging import get_logger
from authhmac.settings import Settings
from authhmac.views import request_view

logger = get_logger(__name__)

AUTHORIZATION_KEYS = ("Authorization", "AUTHORIZATION", "HTTP_AUTHORIZATION", "authorization")

CanonicalStringStrategy = Callable[[Any], str]
R = TypeVar("R")


class AuthHMAC:
    """
    HMAC signer and verifier bound to a credential store.

    Instances hold no per-request state and can be shared across threads as
    long as the credential store supports concurrent reads.

    Examples:
        signer = AuthHMAC({"access_id1": "secret1", "access_id2": "secret2"})
        signer = AuthHMAC(store, service_id="MyApp", canonical_string=my_strategy)
    """

    def __init__(
        self,
        credentials: CredentialStore | Mapping[str, Secret] | None = None,
        service_id: str | None = None,
        canonical_string: CanonicalStringStrategy | None = None,
    ) -> None:
        """
        Args:
            credentials: Credential store or mapping of access key id to secret
            service_id: Authorization header prefix (defaults to the class name)
            canonical_string: Callable producing the string to sign for a request
        """
        self._credential_store = credential_store(credentials)
        self.service_id = service_id if service_id is not None else type(self).__name__
        self._canonical_string = canonical_string or canonical.canonical_string
        self._authorization_re = re.compile(rf"{re.escape(self.service_id)} ([^:]+):(.+)")

    @classmethod
    def from_settings(cls, settings: Settings) -> AuthHMAC:
        return cls(settings.credentials, service_id=settings.service_id)

    # One-shot forms using a single access key id / secret pair

    @classmethod
    def canonical_string_for(cls, request: Any, **options: Any) -> str:
        return cls(None, **options).canonical_string(request)

    @classmethod
    def signature_for(cls, request: Any, secret: Secret, **options: Any) -> str:
        return cls(None, **options).signature(request, secret)

    @classmethod
    def sign_request(cls, request: R, access_key_id: str, secret: Secret, **options: Any) -> R:
        return cls({access_key_id: secret}, **options).sign(request, access_key_id)

    @classmethod
    def authenticate(cls, request: Any, access_key_id: str, secret: Secret, **options: Any) -> bool:
        return cls({access_key_id: secret}, **options).authenticated(request)

    def canonical_string(self, request: Any) -> str:
        """Build the string to sign for ``request``."""
        return self._canonical_string(request)

    def signature(self, request: Any, secret: Secret) -> str:
        """Base64 HMAC-SHA1 of the canonical string keyed by ``secret``."""
        key = secret.encode("utf-8") if isinstance(secret, str) else secret
        message = self.canonical_string(request).encode("utf-8")
        digest = hmac.new(key, message, hashlib.sha1).digest()
        return base64.b64encode(digest).decode("ascii").strip()

    def authorization(self, request: Any, access_key_id: str, secret: Secret) -> str:
        """Authorization header value for ``request``."""
        return f"{self.service_id} {access_key_id}:{self.signature(request, secret)}"

    def sign(self, request: R, access_key_id: str) -> R:
        """
        Sign ``request`` in place with the secret stored for ``access_key_id``.

        May also add a Date header when the request has none.

        Returns:
            The same request object

        Raises:
            UnknownCredential: If no secret is stored for the access key id
        """
        secret = self._credential_store.secret_for(access_key_id)
        if secret is None:
            raise UnknownCredential(access_key_id)
        value = self.authorization(request, access_key_id, secret)
        request_view(request).set_header("Authorization", value)
        logger.debug("Signed request", access_key_id=access_key_id, service_id=self.service_id)
        return request

    def authorization_header(self, request: Any) -> str | None:
        view = request_view(request)
        return view.header_value(AUTHORIZATION_KEYS)

    def _parse_authorization(self, request: Any) -> tuple[str, str] | None:
        header = self.authorization_header(request)
        if header is None:
            return None
        match = self._authorization_re.fullmatch(header)
        if match is None:
            return None
        return match.group(1), match.group(2)

    def access_key_id(self, request: Any) -> str | None:
        """Access key id claimed by the Authorization header, unverified."""
        parsed = self._parse_authorization(request)
        return parsed[0] if parsed else None

    def authenticated(self, request: Any) -> bool:
        """
        Verify the Authorization header of ``request``.

        Missing or malformed headers, unknown access keys and signature
        mismatches all yield False.
        """
        parsed = self._parse_authorization(request)
        if parsed is None:
            logger.debug("No matching Authorization header", service_id=self.service_id)
            return False

        access_key_id, claimed = parsed
        secret = self._credential_store.secret_for(access_key_id)
        if secret is None:
            logger.debug("Unknown access key id", access_key_id=access_key_id)
            return False

        expected = self.signature(request, secret)
        if not hmac.compare_digest(claimed.encode("utf-8"), expected.encode("ascii")):
            logger.debug("Signature mismatch", access_key_id=access_key_id)
            return False
        return True
