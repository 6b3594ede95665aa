from datetime import datetime
from io import StringIO
from typing import Union

from consent_string.bitio import BitBuffer
from consent_string.errors import MalformedConsentError
from consent_string.layout import (
    CMP_ID_OFFSET, CMP_ID_SIZE, CMP_VERSION_OFFSET, CMP_VERSION_SIZE,
    CONSENT_LANGUAGE_CHARS, CONSENT_LANGUAGE_OFFSET, CONSENT_SCREEN_OFFSET,
    CONSENT_SCREEN_SIZE, CREATED_BIT_OFFSET, CREATED_BIT_SIZE,
    CUSTOM_PURPOSES_BITFIELD_OFFSET, HEADER_BIT_SIZE, NUMBER_CUSTOM_PURPOSES_OFFSET,
    NUMBER_CUSTOM_PURPOSES_SIZE, PUBLISHER_PURPOSES_LIST_VERSION_OFFSET,
    PUBLISHER_PURPOSES_LIST_VERSION_SIZE, PURPOSES_OFFSET, PURPOSES_SIZE,
    UPDATED_BIT_OFFSET, UPDATED_BIT_SIZE, VENDOR_LIST_VERSION_OFFSET,
    VENDOR_LIST_VERSION_SIZE, VERSION_BIT_OFFSET, VERSION_BIT_SIZE, V1_FIELDS,
    buffer_size_in_bytes, total_bit_size,
)
from consent_string.purpose import Purpose
from consent_string.records import ConsentRecord
from utils import format_range_str, parse_range_str

VERSION = 1

# dump lines after "version": one per fixed field, then the custom bitmap
TEXT_KEYS = [f.name for f in V1_FIELDS[1:]] + ["custom_purposes"]

class ConsentRecordV1(ConsentRecord):
    """
    Version 1 consent backed by a BitBuffer. Fields are parsed on demand, so the
    record is cheap to decode, query a few times and throw away.
    """
    __slots__ = ("_bits",)

    def __init__(self, bits: BitBuffer):
        if bits.bit_length < HEADER_BIT_SIZE:
            raise MalformedConsentError(
                f"Consent string has {bits.bit_length} bits, header needs {HEADER_BIT_SIZE}")
        count = bits.get_uint(NUMBER_CUSTOM_PURPOSES_OFFSET, NUMBER_CUSTOM_PURPOSES_SIZE)
        if bits.bit_length < total_bit_size(count):
            raise MalformedConsentError(
                f"Consent string declares {count} custom purposes but has only "
                f"{bits.bit_length - HEADER_BIT_SIZE} bits after the header")
        self._bits = bits

    @property
    def version(self) -> int:
        return self._bits.get_uint(VERSION_BIT_OFFSET, VERSION_BIT_SIZE)

    @property
    def consent_record_created(self) -> datetime:
        return self._bits.get_timestamp_deciseconds(CREATED_BIT_OFFSET, CREATED_BIT_SIZE)

    @property
    def consent_record_last_updated(self) -> datetime:
        return self._bits.get_timestamp_deciseconds(UPDATED_BIT_OFFSET, UPDATED_BIT_SIZE)

    @property
    def cmp_id(self) -> int:
        return self._bits.get_uint(CMP_ID_OFFSET, CMP_ID_SIZE)

    @property
    def cmp_version(self) -> int:
        return self._bits.get_uint(CMP_VERSION_OFFSET, CMP_VERSION_SIZE)

    @property
    def consent_screen(self) -> int:
        return self._bits.get_uint(CONSENT_SCREEN_OFFSET, CONSENT_SCREEN_SIZE)

    @property
    def consent_language(self) -> str:
        return self._bits.get_six_bit_string(CONSENT_LANGUAGE_OFFSET, CONSENT_LANGUAGE_CHARS)

    @property
    def vendor_list_version(self) -> int:
        return self._bits.get_uint(VENDOR_LIST_VERSION_OFFSET, VENDOR_LIST_VERSION_SIZE)

    @property
    def publisher_purposes_version(self) -> int:
        return self._bits.get_uint(PUBLISHER_PURPOSES_LIST_VERSION_OFFSET, PUBLISHER_PURPOSES_LIST_VERSION_SIZE)

    @property
    def allowed_purpose_ids(self) -> set[int]:
        return {i + 1 for i in range(PURPOSES_SIZE) if self._bits.get_bit(PURPOSES_OFFSET + i)}

    @property
    def allowed_purposes_bits(self) -> int:
        return self._bits.get_uint(PURPOSES_OFFSET, PURPOSES_SIZE)

    def is_purpose_allowed(self, purpose: Union[int, Purpose]) -> bool:
        purpose_id = int(purpose)
        if purpose_id < 1 or purpose_id > PURPOSES_SIZE:
            return False
        return self._bits.get_bit(PURPOSES_OFFSET + purpose_id - 1)

    @property
    def custom_purpose_count(self) -> int:
        return self._bits.get_uint(NUMBER_CUSTOM_PURPOSES_OFFSET, NUMBER_CUSTOM_PURPOSES_SIZE)

    @property
    def custom_allowed_purpose_ids(self) -> set[int]:
        count = self.custom_purpose_count
        return {i + 1 for i in range(count)
                if self._bits.get_bit(CUSTOM_PURPOSES_BITFIELD_OFFSET + i)}

    @property
    def custom_allowed_purposes_bits(self) -> int:
        return self._bits.get_uint(CUSTOM_PURPOSES_BITFIELD_OFFSET, self.custom_purpose_count)

    def is_custom_purpose_allowed(self, purpose_id: int) -> bool:
        if purpose_id < 1 or purpose_id > self.custom_purpose_count:
            return False
        return self._bits.get_bit(CUSTOM_PURPOSES_BITFIELD_OFFSET + purpose_id - 1)

    def to_bytes(self) -> bytes:
        return self._bits.to_bytes()

    def __repr__(self) -> str:
        return (
            f"ConsentRecordV1(version={self.version}"
            f", created={self.consent_record_created.isoformat()}"
            f", last_updated={self.consent_record_last_updated.isoformat()}"
            f", cmp_id={self.cmp_id}, cmp_version={self.cmp_version}"
            f", consent_screen={self.consent_screen}"
            f", consent_language={self.consent_language}"
            f", vendor_list_version={self.vendor_list_version}"
            f", publisher_purposes_version={self.publisher_purposes_version}"
            f", purposes={sorted(self.allowed_purpose_ids)}"
            f", custom_purposes={sorted(self.custom_allowed_purpose_ids)})"
        )

    def dump_string(self, tw) -> None:
        print("version", self.version, file=tw)
        print("created", self.consent_record_created.isoformat(timespec="milliseconds"), file=tw)
        print("last_updated", self.consent_record_last_updated.isoformat(timespec="milliseconds"), file=tw)
        print("cmp_id", self.cmp_id, file=tw)
        print("cmp_version", self.cmp_version, file=tw)
        print("consent_screen", self.consent_screen, file=tw)
        print("consent_language", self.consent_language, file=tw)
        print("vendor_list_version", self.vendor_list_version, file=tw)
        print("publisher_purposes_version", self.publisher_purposes_version, file=tw)
        print("purposes", format_range_str(self.allowed_purpose_ids), file=tw)
        print("custom_purpose_count", self.custom_purpose_count, file=tw)
        print("custom_purposes", format_range_str(self.custom_allowed_purpose_ids), file=tw)

    @staticmethod
    def load_from_text(tw: StringIO) -> "ConsentRecordV1":
        """Rebuild from dump_string() output (the version line already consumed)."""
        values: dict[str, str] = {}
        for key in TEXT_KEYS:
            line = tw.readline()
            got, _, value = line.strip().partition(" ")
            if got != key:
                raise MalformedConsentError(f"Expected {key!r} line, got {line.strip()!r}")
            values[key] = value.strip()

        try:
            count = int(values["custom_purpose_count"])
            purposes = parse_range_str(values["purposes"])
            custom = parse_range_str(values["custom_purposes"])
            created = datetime.fromisoformat(values["created"])
            updated = datetime.fromisoformat(values["last_updated"])
            numbers = {k: int(values[k]) for k in (
                "cmp_id", "cmp_version", "consent_screen",
                "vendor_list_version", "publisher_purposes_version")}
        except ValueError as e:
            raise MalformedConsentError(f"Invalid consent text: {e}") from e

        if not 0 <= count < 1 << NUMBER_CUSTOM_PURPOSES_SIZE:
            raise MalformedConsentError(f"custom_purpose_count out of range: {count}")
        if any(p < 1 or p > PURPOSES_SIZE for p in purposes):
            raise MalformedConsentError("purpose id out of range")
        if any(p < 1 or p > count for p in custom):
            raise MalformedConsentError("custom purpose id exceeds custom_purpose_count")

        bits = BitBuffer(buffer_size_in_bytes(count))
        bits.set_uint(VERSION_BIT_OFFSET, VERSION_BIT_SIZE, VERSION)
        bits.set_timestamp_deciseconds(CREATED_BIT_OFFSET, CREATED_BIT_SIZE, created)
        bits.set_timestamp_deciseconds(UPDATED_BIT_OFFSET, UPDATED_BIT_SIZE, updated)
        bits.set_uint(CMP_ID_OFFSET, CMP_ID_SIZE, numbers["cmp_id"])
        bits.set_uint(CMP_VERSION_OFFSET, CMP_VERSION_SIZE, numbers["cmp_version"])
        bits.set_uint(CONSENT_SCREEN_OFFSET, CONSENT_SCREEN_SIZE, numbers["consent_screen"])
        bits.set_six_bit_string(CONSENT_LANGUAGE_OFFSET, CONSENT_LANGUAGE_CHARS, values["consent_language"])
        bits.set_uint(VENDOR_LIST_VERSION_OFFSET, VENDOR_LIST_VERSION_SIZE, numbers["vendor_list_version"])
        bits.set_uint(PUBLISHER_PURPOSES_LIST_VERSION_OFFSET, PUBLISHER_PURPOSES_LIST_VERSION_SIZE,
                      numbers["publisher_purposes_version"])
        for p in purposes:
            bits.set_bit(PURPOSES_OFFSET + p - 1)
        bits.set_uint(NUMBER_CUSTOM_PURPOSES_OFFSET, NUMBER_CUSTOM_PURPOSES_SIZE, count)
        for p in custom:
            bits.set_bit(CUSTOM_PURPOSES_BITFIELD_OFFSET + p - 1)
        return ConsentRecordV1(bits)
