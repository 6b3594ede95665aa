from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from consent_string.bitio import BitBuffer
from consent_string.errors import ConsentCreateError, InvalidArgumentError, MissingFieldError
from consent_string.layout import (
    CMP_ID_OFFSET, CMP_ID_SIZE, CMP_VERSION_OFFSET, CMP_VERSION_SIZE,
    CONSENT_LANGUAGE_CHARS, CONSENT_LANGUAGE_OFFSET, CONSENT_SCREEN_OFFSET,
    CONSENT_SCREEN_SIZE, CREATED_BIT_OFFSET, CREATED_BIT_SIZE,
    CUSTOM_PURPOSES_BITFIELD_OFFSET, MAX_CUSTOM_PURPOSES, NUMBER_CUSTOM_PURPOSES_OFFSET,
    NUMBER_CUSTOM_PURPOSES_SIZE, PUBLISHER_PURPOSES_LIST_VERSION_OFFSET,
    PUBLISHER_PURPOSES_LIST_VERSION_SIZE, PURPOSES_OFFSET, PURPOSES_SIZE,
    UPDATED_BIT_OFFSET, UPDATED_BIT_SIZE, VENDOR_LIST_VERSION_OFFSET,
    VENDOR_LIST_VERSION_SIZE, VERSION_BIT_OFFSET, VERSION_BIT_SIZE,
    buffer_size_in_bytes,
)
from consent_string.log import get_logger
from consent_string.purpose import Purpose
from consent_string.records.v1 import VERSION, ConsentRecordV1

logger = get_logger(__name__)

def _validated_ids(ids: Iterable[int], upper: int, arg_name: str) -> set[int]:
    if ids is None:
        raise InvalidArgumentError(f"Argument {arg_name} is None")
    result = set(ids)
    if any(i < 0 or i > upper for i in result):
        raise InvalidArgumentError(f"Invalid purpose ID found in {arg_name}")
    return result

@dataclass
class ConsentBuilder:
    """
    Collects the fields of a version 1 consent string. Every with_* method
    returns the builder; build() validates once and produces the record.

    Purpose id sets are range checked as soon as they are supplied.
    """
    consent_record_created: Optional[datetime] = None
    consent_record_last_updated: Optional[datetime] = None
    cmp_id: int = 0
    cmp_version: int = 0
    consent_screen_id: int = 0
    consent_language: Optional[str] = None
    vendor_list_version: int = 0
    publisher_purposes_list_version: int = 0
    allowed_purposes: set[int] = field(default_factory=set)
    custom_allowed_purposes: set[int] = field(default_factory=set)

    def with_consent_record_created_on(self, created: datetime) -> "ConsentBuilder":
        self.consent_record_created = created
        return self

    def with_consent_record_last_updated_on(self, last_updated: datetime) -> "ConsentBuilder":
        self.consent_record_last_updated = last_updated
        return self

    def with_cmp_id(self, cmp_id: int) -> "ConsentBuilder":
        self.cmp_id = cmp_id
        return self

    def with_cmp_version(self, cmp_version: int) -> "ConsentBuilder":
        self.cmp_version = cmp_version
        return self

    def with_consent_screen_id(self, consent_screen_id: int) -> "ConsentBuilder":
        self.consent_screen_id = consent_screen_id
        return self

    def with_consent_language(self, consent_language: str) -> "ConsentBuilder":
        """Two-letter ISO 639-1 code; lowercase input is upper-cased."""
        if consent_language is None:
            raise InvalidArgumentError("Argument consent_language is None")
        lang = consent_language.upper()
        if len(lang) != CONSENT_LANGUAGE_CHARS or not all("A" <= c <= "Z" for c in lang):
            raise InvalidArgumentError(f"Invalid consent language: {consent_language!r}")
        self.consent_language = lang
        return self

    def with_vendor_list_version(self, vendor_list_version: int) -> "ConsentBuilder":
        self.vendor_list_version = vendor_list_version
        return self

    def with_publisher_purposes_list_version(self, version: int) -> "ConsentBuilder":
        self.publisher_purposes_list_version = version
        return self

    def with_allowed_purpose_ids(self, purpose_ids: Iterable[int]) -> "ConsentBuilder":
        self.allowed_purposes = _validated_ids(purpose_ids, PURPOSES_SIZE, "allowed_purpose_ids")
        return self

    def with_allowed_purposes(self, purposes: Iterable[Purpose]) -> "ConsentBuilder":
        if purposes is None:
            raise InvalidArgumentError("Argument allowed_purposes is None")
        return self.with_allowed_purpose_ids(int(p) for p in purposes)

    def with_custom_allowed_purpose_ids(self, purpose_ids: Iterable[int]) -> "ConsentBuilder":
        ids = _validated_ids(purpose_ids, MAX_CUSTOM_PURPOSES, "custom_allowed_purpose_ids")
        if len(ids) > MAX_CUSTOM_PURPOSES:
            raise InvalidArgumentError(
                f"At most {MAX_CUSTOM_PURPOSES} custom purposes fit in a consent string")
        self.custom_allowed_purposes = ids
        return self

    def build(self) -> ConsentRecordV1:
        if self.consent_record_created is None:
            raise MissingFieldError("consent_record_created must be set")
        if self.consent_record_last_updated is None:
            raise MissingFieldError("consent_record_last_updated must be set")
        if self.consent_language is None:
            raise MissingFieldError("consent_language must be set")
        if self.vendor_list_version <= 0:
            raise ConsentCreateError(f"Invalid value for vendor_list_version: {self.vendor_list_version}")

        num_custom = len(self.custom_allowed_purposes)
        bits = BitBuffer(buffer_size_in_bytes(num_custom))

        bits.set_uint(VERSION_BIT_OFFSET, VERSION_BIT_SIZE, VERSION)
        bits.set_timestamp_deciseconds(CREATED_BIT_OFFSET, CREATED_BIT_SIZE, self.consent_record_created)
        bits.set_timestamp_deciseconds(UPDATED_BIT_OFFSET, UPDATED_BIT_SIZE, self.consent_record_last_updated)
        bits.set_uint(CMP_ID_OFFSET, CMP_ID_SIZE, self.cmp_id)
        bits.set_uint(CMP_VERSION_OFFSET, CMP_VERSION_SIZE, self.cmp_version)
        bits.set_uint(CONSENT_SCREEN_OFFSET, CONSENT_SCREEN_SIZE, self.consent_screen_id)
        bits.set_six_bit_string(CONSENT_LANGUAGE_OFFSET, CONSENT_LANGUAGE_CHARS, self.consent_language)
        bits.set_uint(VENDOR_LIST_VERSION_OFFSET, VENDOR_LIST_VERSION_SIZE, self.vendor_list_version)
        bits.set_uint(PUBLISHER_PURPOSES_LIST_VERSION_OFFSET, PUBLISHER_PURPOSES_LIST_VERSION_SIZE,
                      self.publisher_purposes_list_version)

        for i in range(PURPOSES_SIZE):
            if i + 1 in self.allowed_purposes:
                bits.set_bit(PURPOSES_OFFSET + i)
            else:
                bits.clear_bit(PURPOSES_OFFSET + i)

        # the custom bitmap is exactly as long as the id set is large
        bits.set_uint(NUMBER_CUSTOM_PURPOSES_OFFSET, NUMBER_CUSTOM_PURPOSES_SIZE, num_custom)
        for i in range(num_custom):
            if i + 1 in self.custom_allowed_purposes:
                bits.set_bit(CUSTOM_PURPOSES_BITFIELD_OFFSET + i)
            else:
                bits.clear_bit(CUSTOM_PURPOSES_BITFIELD_OFFSET + i)

        logger.debug("consent_built", num_bytes=len(bits), custom_purpose_count=num_custom)
        return ConsentRecordV1(bits)
