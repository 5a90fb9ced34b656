"""
Submitter identity for API requests.

Authentication happens upstream; here the identity arrives explicitly per
request in the X-Submitter header and is passed down as a plain value.
"""
import hmac

from flask import request

from benchwatch.config import SUBMITTER_HEADER
from benchwatch.errors import Unauthorized


def current_submitter() -> str:
    submitter = (request.headers.get(SUBMITTER_HEADER) or '').strip()
    if not submitter:
        raise Unauthorized(f"Missing {SUBMITTER_HEADER} header")
    return submitter


def token_matches(expected: str) -> bool:
    """Compare the request's bearer token to the configured ingest token."""
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token:
        return False
    return hmac.compare_digest(token.strip(), expected)
