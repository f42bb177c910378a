"""Pre-signed URLs for S3 compatible object stores using Signature Version 2 query-string authentication."""
from typing import Optional, Union

from s3sign.signer import ALLOWED_PARAMETERS, SigningRequest, sign
from s3sign.url import UnparsableURL, parse_url
from s3sign.utils import expires_at, parse_duration


default_duration = "1h"
default_method = "GET"

def presign(url: str,
            access_key_id: str,
            secret_key: Union[str, bytes],
            method: str=default_method,
            expires: Optional[int]=None) -> str:
    """Return 'url' with 'AWSAccessKeyId', 'Expires', and 'Signature' query parameters set.

    'expires' is a unix timestamp, defaulting to one hour from now. Raise UnparsableURL if 'url' cannot be parsed.
    """
    parsed = parse_url(url)
    if expires is None:
        expires = expires_at(parse_duration(default_duration))
    signature = sign(method, expires, parsed.path, parsed.query, secret_key)
    return parsed.with_query(AWSAccessKeyId=access_key_id, Expires=str(expires), Signature=signature)
