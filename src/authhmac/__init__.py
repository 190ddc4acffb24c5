"""
authhmac: HMAC authentication for HTTP requests.

Builds a canonical string from a request's method, Content-Type,
Content-MD5, Date and path, signs it with HMAC-SHA1 and carries the
signature in the Authorization header.
"""

from authhmac.canonical import canonical_string
from authhmac.credentials import CredentialStore, MappingCredentialStore
from authhmac.errors import AuthHMACError, UnknownCredential, UnsupportedRequestShape
from authhmac.signer import AuthHMAC
from authhmac.views import RequestView, request_view

__version__ = "1.0.0"

__all__ = [
    "AuthHMAC",
    "AuthHMACError",
    "CredentialStore",
    "MappingCredentialStore",
    "RequestView",
    "UnknownCredential",
    "UnsupportedRequestShape",
    "canonical_string",
    "request_view",
]
