from enum import IntEnum

class Purpose(IntEnum):
    """Named standard purposes. Ids without a name map to UNDEFINED."""
    STORAGE_AND_ACCESS = 1
    PERSONALIZATION = 2
    AD_SELECTION = 3
    CONTENT_DELIVERY = 4
    MEASUREMENT = 5
    UNDEFINED = -1

    @classmethod
    def value_of(cls, purpose_id: int) -> "Purpose":
        try:
            return cls(purpose_id)
        except ValueError:
            return cls.UNDEFINED
