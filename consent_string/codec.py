# Base64 transport for consent strings.
# Tokens use the URL-safe alphabet with the padding omitted.

from __future__ import annotations
import base64
import binascii
import re
from typing import Union

from consent_string.bitio import BitBuffer
from consent_string.errors import InvalidArgumentError, MalformedConsentError
from consent_string.log import get_logger
from consent_string.records import ConsentRecord

logger = get_logger(__name__)

_URLSAFE_TOKEN = re.compile(r"[A-Za-z0-9_-]+={0,2}")


def from_bytes(data: Union[bytes, bytearray, None]) -> ConsentRecord:
    if not data:
        raise InvalidArgumentError("Null or empty consent bytes passed as an argument")
    record = ConsentRecord.load(BitBuffer(data))
    logger.debug("consent_decoded", version=record.version, num_bytes=len(data))
    return record


def from_base64_string(consent_string: Union[str, None]) -> ConsentRecord:
    if not consent_string:
        raise InvalidArgumentError("Null or empty consent string passed as an argument")
    if not _URLSAFE_TOKEN.fullmatch(consent_string):
        raise MalformedConsentError("Consent string is not URL-safe Base64")
    token = consent_string.rstrip("=")
    try:
        data = base64.urlsafe_b64decode(token + "=" * (-len(token) % 4))
    except binascii.Error as e:
        raise MalformedConsentError(f"Consent string is not valid Base64: {e}") from e
    return from_bytes(data)


def decode(consent: Union[str, bytes, bytearray, None]) -> ConsentRecord:
    """Decode either a Base64 token or the raw consent bytes."""
    if isinstance(consent, str):
        return from_base64_string(consent)
    return from_bytes(consent)


def to_base64_string(record: ConsentRecord) -> str:
    return base64.urlsafe_b64encode(record.to_bytes()).decode("ascii").rstrip("=")


def encode(record: ConsentRecord) -> str:
    return to_base64_string(record)
