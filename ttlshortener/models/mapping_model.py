from dataclasses import dataclass, replace
from datetime import datetime, UTC
from typing import Any


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse(value: str | datetime | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)


@dataclass(frozen=True)
class MappingModel:
    """Represent a short identifier to target URL mapping.

    Attributes:
        identifier (str):
            Unique fixed-length short identifier of the link.
        target (str):
            The original long URL that the identifier resolves to.
        expires_at (datetime):
            Moment (UTC) from which the link is expired and may be reclaimed.
        created_at (Optional[datetime]):
            Set by the data store when the record is inserted.
        updated_at (Optional[datetime]):
            Set by the data store whenever the record is written.

    Example:
        >>> from datetime import datetime, timedelta, UTC
        >>> mapping = MappingModel(
        ...     identifier='aB3xY9',
        ...     target='https://example.com/article/123',
        ...     expires_at=datetime.now(UTC) + timedelta(days=30),
        ... )
        >>> mapping.identifier
        'aB3xY9'
        >>> mapping.created_at is None
        True
    """

    identifier: str
    target: str
    expires_at: datetime
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def stamped(self, now: datetime) -> 'MappingModel':
        """Return a copy carrying creation metadata assigned at insert time."""
        return replace(self, created_at=now, updated_at=now)

    def to_dict(self) -> dict[str, Any]:
        return {
            'identifier': self.identifier,
            'target': self.target,
            'expires_at': _isoformat(self.expires_at),
            'created_at': _isoformat(self.created_at),
            'updated_at': _isoformat(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'MappingModel':
        return cls(
            identifier=data['identifier'],
            target=data['target'],
            expires_at=_parse(data['expires_at']),
            created_at=_parse(data.get('created_at')),
            updated_at=_parse(data.get('updated_at')),
        )
