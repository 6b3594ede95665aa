# Bit layout of the version 1 publisher purposes consent string.
# Offsets are cumulative; every field is MSB first.

from dataclasses import dataclass

@dataclass(frozen=True)
class Field:
    name: str
    offset: int
    width: int

    @property
    def end(self) -> int:
        return self.offset + self.width

VERSION_BIT_OFFSET = 0
VERSION_BIT_SIZE = 6
CREATED_BIT_OFFSET = 6
CREATED_BIT_SIZE = 36
UPDATED_BIT_OFFSET = 42
UPDATED_BIT_SIZE = 36
CMP_ID_OFFSET = 78
CMP_ID_SIZE = 12
CMP_VERSION_OFFSET = 90
CMP_VERSION_SIZE = 12
CONSENT_SCREEN_OFFSET = 102
CONSENT_SCREEN_SIZE = 6
CONSENT_LANGUAGE_OFFSET = 108
CONSENT_LANGUAGE_SIZE = 12
CONSENT_LANGUAGE_CHARS = 2
VENDOR_LIST_VERSION_OFFSET = 120
VENDOR_LIST_VERSION_SIZE = 12
PUBLISHER_PURPOSES_LIST_VERSION_OFFSET = 132
PUBLISHER_PURPOSES_LIST_VERSION_SIZE = 12
PURPOSES_OFFSET = 144
PURPOSES_SIZE = 24
NUMBER_CUSTOM_PURPOSES_OFFSET = 168
NUMBER_CUSTOM_PURPOSES_SIZE = 6
CUSTOM_PURPOSES_BITFIELD_OFFSET = 174

HEADER_BIT_SIZE = CUSTOM_PURPOSES_BITFIELD_OFFSET
MAX_CUSTOM_PURPOSES = (1 << NUMBER_CUSTOM_PURPOSES_SIZE) - 1

V1_FIELDS: list[Field] = [
    Field("version", VERSION_BIT_OFFSET, VERSION_BIT_SIZE),
    Field("created", CREATED_BIT_OFFSET, CREATED_BIT_SIZE),
    Field("last_updated", UPDATED_BIT_OFFSET, UPDATED_BIT_SIZE),
    Field("cmp_id", CMP_ID_OFFSET, CMP_ID_SIZE),
    Field("cmp_version", CMP_VERSION_OFFSET, CMP_VERSION_SIZE),
    Field("consent_screen", CONSENT_SCREEN_OFFSET, CONSENT_SCREEN_SIZE),
    Field("consent_language", CONSENT_LANGUAGE_OFFSET, CONSENT_LANGUAGE_SIZE),
    Field("vendor_list_version", VENDOR_LIST_VERSION_OFFSET, VENDOR_LIST_VERSION_SIZE),
    Field("publisher_purposes_version", PUBLISHER_PURPOSES_LIST_VERSION_OFFSET, PUBLISHER_PURPOSES_LIST_VERSION_SIZE),
    Field("purposes", PURPOSES_OFFSET, PURPOSES_SIZE),
    Field("custom_purpose_count", NUMBER_CUSTOM_PURPOSES_OFFSET, NUMBER_CUSTOM_PURPOSES_SIZE),
]

def total_bit_size(custom_count: int) -> int:
    return HEADER_BIT_SIZE + custom_count

def buffer_size_in_bytes(custom_count: int) -> int:
    return (total_bit_size(custom_count) + 7) // 8
