"""
Shared pytest fixtures for the consent_string test suite.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from consent_string.bitio import BitBuffer
from consent_string.layout import HEADER_BIT_SIZE
from consent_string.records.builder import ConsentBuilder
from consent_string.records.v1 import ConsentRecordV1

# Version 1 string with cmp id 12, purposes {1,3,4} and custom purposes {2,4,5}
V1_CONSENT_STRING = "BOjUNEbOjUNEbAMAWhENABABsAAAFWA"

# created/updated 2018-06-04T00:00:00Z, cmp id 15, cmp version 5, screen 18,
# language EN, vendor list 150, publisher purposes list 150
HEADER_FIXTURE = (
    "000011"                                  # Version
    + "001110001110110011010000101000000000"  # Created
    + "001110001110110011010000101000000000"  # Updated
    + "000000001111"                          # CMP ID
    + "000000000101"                          # CMP version
    + "010010"                                # Consent screen ID
    + "000100001101"                          # Language code
    + "000010010110"                          # Vendor list version
    + "000010010110"                          # Publisher purposes list version
)


def record_from_bits(bit_str: str) -> ConsentRecordV1:
    """Wrap a binary string, zero filling the rest of the fixed header."""
    return ConsentRecordV1(BitBuffer.from_binary_string(bit_str.ljust(HEADER_BIT_SIZE, "0")))


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@pytest.fixture
def builder(now: datetime) -> ConsentBuilder:
    """A builder holding every required field."""
    return (
        ConsentBuilder()
        .with_consent_record_created_on(now)
        .with_consent_record_last_updated_on(now)
        .with_consent_language("EN")
        .with_vendor_list_version(1)
    )
