"""Signature Version 2 query-string authentication for S3 style object stores.

The signature covers the string

    METHOD\\n\\n\\nEXPIRES\\nCANONICALIZED_RESOURCE

where Content-MD5 and Content-Type are left blank, since pre-signed URLs are used without those headers.
https://docs.aws.amazon.com/AmazonS3/latest/userguide/RESTAuthentication.html#RESTAuthenticationQueryStringAuth
"""
import hmac
import base64
import hashlib
from typing import Dict, List, NamedTuple, Optional, Union

from s3sign.url import Query, as_values, encode_query


# Sub-resources and response overrides that participate in the signature. Everything else is ignored.
ALLOWED_PARAMETERS = frozenset([
    "acl",
    "delete",
    "lifecycle",
    "location",
    "logging",
    "notification",
    "partnumber",
    "policy",
    "requestpayment",
    "response-cache-control",
    "response-content-disposition",
    "response-content-encoding",
    "response-content-language",
    "response-content-type",
    "response-expires",
    "torrent",
    "uploadid",
    "uploads",
    "versionid",
    "versioning",
    "versions",
    "website",
])

def canonical_query(query: Optional[Query]=None) -> str:
    """Filter 'query' down to the allowed parameters and encode it. Names are folded to lower case, values are not."""
    query = query or dict()
    signed: Dict[str, List[str]] = dict()
    for name in sorted(query):
        lname = name.lower()
        if lname in ALLOWED_PARAMETERS:
            signed.setdefault(lname, list()).extend(as_values(query[name]))
    return encode_query(signed)

def canonicalized_resource(path: str, query: Optional[Query]=None) -> str:
    q = canonical_query(query)
    if q:
        return f"{path}?{q}"
    return path

def string_to_sign(method: str, expires: int, resource: str) -> str:
    return f"{method}\n\n\n{expires}\n{resource}"

def sign(method: str, expires: int, path: str, query: Optional[Query], secret_key: Union[str, bytes]) -> str:
    """Return the base64 encoded HMAC-SHA1 signature for a request.

    'path' must be percent-encoded exactly as it appears on the wire.
    """
    if isinstance(secret_key, str):
        secret_key = secret_key.encode("utf-8")
    msg = string_to_sign(method, int(expires), canonicalized_resource(path, query))
    digest = hmac.new(secret_key, msg.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("utf-8")

class SigningRequest(NamedTuple):
    resource_path: str
    query: Query
    method: str
    expires: int
    secret_key: bytes

    def canonicalized_resource(self) -> str:
        return canonicalized_resource(self.resource_path, self.query)

    def string_to_sign(self) -> str:
        return string_to_sign(self.method, self.expires, self.canonicalized_resource())

    def sign(self) -> str:
        return sign(self.method, self.expires, self.resource_path, self.query, self.secret_key)
