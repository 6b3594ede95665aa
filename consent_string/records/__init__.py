from abc import ABC, abstractmethod
from datetime import datetime
from io import StringIO
from typing import Union

from consent_string.bitio import BitBuffer
from consent_string.errors import MalformedConsentError, UnsupportedVersionError
from consent_string.layout import VERSION_BIT_OFFSET, VERSION_BIT_SIZE
from consent_string.log import get_logger
from consent_string.purpose import Purpose

logger = get_logger(__name__)

class ConsentRecord(ABC):
    """
    Publisher purposes consent, one subclass per format version.

    is_purpose_allowed() and is_custom_purpose_allowed() together fully describe
    the publisher's consent for its own data use.
    """
    __slots__ = ()

    @property
    @abstractmethod
    def version(self) -> int: ...
    @property
    @abstractmethod
    def consent_record_created(self) -> datetime: ...
    @property
    @abstractmethod
    def consent_record_last_updated(self) -> datetime: ...
    @property
    @abstractmethod
    def cmp_id(self) -> int: ...
    @property
    @abstractmethod
    def cmp_version(self) -> int: ...
    @property
    @abstractmethod
    def consent_screen(self) -> int: ...
    @property
    @abstractmethod
    def consent_language(self) -> str: ...
    @property
    @abstractmethod
    def vendor_list_version(self) -> int: ...
    @property
    @abstractmethod
    def publisher_purposes_version(self) -> int: ...
    @property
    @abstractmethod
    def allowed_purpose_ids(self) -> set[int]: ...
    @property
    @abstractmethod
    def allowed_purposes_bits(self) -> int: ...
    @property
    @abstractmethod
    def custom_allowed_purpose_ids(self) -> set[int]: ...
    @property
    @abstractmethod
    def custom_allowed_purposes_bits(self) -> int: ...

    @abstractmethod
    def is_purpose_allowed(self, purpose: Union[int, Purpose]) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_custom_purpose_allowed(self, purpose_id: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    def to_bytes(self) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def dump_string(self, tw) -> None:
        raise NotImplementedError

    @property
    def allowed_purposes(self) -> set[Purpose]:
        return {Purpose.value_of(i) for i in self.allowed_purpose_ids}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConsentRecord):
            return NotImplemented
        return type(self) is type(other) and self.to_bytes() == other.to_bytes()

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    @staticmethod
    def load(bits: BitBuffer) -> "ConsentRecord":
        import consent_string.records.v1
        if bits.bit_length < VERSION_BIT_SIZE:
            raise MalformedConsentError("Consent string too short to hold a version")
        version = bits.get_uint(VERSION_BIT_OFFSET, VERSION_BIT_SIZE)
        if version == 1:
            return consent_string.records.v1.ConsentRecordV1(bits)
        else:
            logger.debug("unsupported_consent_version", version=version)
            raise UnsupportedVersionError(version)

    @staticmethod
    def load_from_text(tw: StringIO) -> "ConsentRecord":
        import consent_string.records.v1
        key, _, value = tw.readline().strip().partition(" ")
        if key != "version":
            raise MalformedConsentError(f"Expected version line, got {key!r}")
        try:
            version = int(value)
        except ValueError as e:
            raise MalformedConsentError(f"Invalid version line: {value!r}") from e
        if version == 1:
            return consent_string.records.v1.ConsentRecordV1.load_from_text(tw)
        else:
            raise UnsupportedVersionError(version)
