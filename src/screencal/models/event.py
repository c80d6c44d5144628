"""The canonical calendar event produced by the pipeline.

:class:`EventRecord` is created by the response normalizer (pipeline
output) or by a direct user edit through :meth:`EventRecord.from_form`.
It is discarded when the user cancels, or after the calendar commit
succeeds and the store takes ownership.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID, uuid4

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, field_validator

DEFAULT_DURATION = timedelta(minutes=60)


class EventRecord(BaseModel):
    """A single calendar event ready for review and commit.

    Attributes:
        id: Opaque identifier generated at creation.  Immutable.
        title: Non-empty event title.
        start: Event start (local-time-aware).  For all-day events only
            the date part is meaningful.
        end: Explicit event end, or ``None``.  Not required to be after
            ``start``; ordering is a display concern.
        is_all_day: Treat ``start``/``end`` as calendar dates.
        location: Event location, or ``None``.
        notes: Free-text notes, or ``None``.
        url: Reference link, or ``None``.
        calendar_id: Destination calendar, resolved at commit time when
            ``None``.
        source_text: The text the event was extracted from, kept for
            auditing.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, frozen=True)
    title: str
    start: datetime
    end: datetime | None = None
    is_all_day: bool = False
    location: str | None = None
    notes: str | None = None
    url: AnyUrl | None = None
    calendar_id: str | None = None
    source_text: str | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        """Reject empty or whitespace-only titles."""
        if not value.strip():
            raise ValueError("title must not be empty")
        return value

    @property
    def effective_end(self) -> datetime:
        """The explicit end, or ``start`` plus one hour."""
        return self.end if self.end is not None else self.start + DEFAULT_DURATION

    @property
    def duration_minutes(self) -> int | None:
        """Minutes between start and the explicit end.

        ``None`` for all-day events and when no end was given.
        """
        if self.is_all_day or self.end is None:
            return None
        return int((self.end - self.start).total_seconds() // 60)

    @classmethod
    def from_form(
        cls,
        title: str,
        start: datetime,
        end: datetime | None = None,
        is_all_day: bool = False,
        location: str = "",
        notes: str = "",
        url: str = "",
        calendar_id: str | None = None,
        source_text: str | None = None,
    ) -> EventRecord:
        """Build a record from edited form fields.

        Blank text fields become ``None`` the same way the normalizer
        treats them.

        Raises:
            pydantic.ValidationError: If the title is blank or the URL
                is not a valid URI.
        """
        return cls(
            title=title,
            start=start,
            end=end,
            is_all_day=is_all_day,
            location=location.strip() or None,
            notes=notes.strip() or None,
            url=url.strip() or None,
            calendar_id=calendar_id or None,
            source_text=source_text,
        )
