from __future__ import annotations


class PartialUpdateError(ValueError):
    """A partial update request that cannot be turned into a statement."""

    NO_ID = "Unable to generate SQL statement because there is no id field"
    MULTIPLE_IDS = "Unable to generate SQL statement because there are multiple id fields"
    NO_CHANGES = "Unable to generate SQL statement because there are no changes"


class ValueDecodeError(ValueError):
    """A stored value that cannot be decoded into the record model."""


class UnknownBackendError(ValueError):
    pass
