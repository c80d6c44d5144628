"""Prompt builders for event extraction and image transcription.

All three parsing backends share one user prompt, built fresh on every
call so that "today" and "tomorrow" always reflect the wall clock at
invocation.  Relative dates ("next Monday") are resolved by the model
itself: the prompt gives it today's date and weekday and asks for
absolute ``YYYY-MM-DD`` dates back.
"""

from __future__ import annotations

from datetime import datetime

SYSTEM_INSTRUCTION = (
    "You are a helpful assistant that extracts calendar event information "
    "from text. Always respond with valid JSON only, no markdown code blocks "
    "or other text."
)
"""System instruction sent to the remote vendors."""

OCR_INSTRUCTION = (
    "Extract and return only the text visible in this image. "
    "Return the raw text without any commentary or formatting."
)
"""Fixed instruction for the vision-model text-recognition backend."""

EVENT_FIELDS: tuple[str, ...] = (
    "title",
    "date",
    "start_time",
    "end_time",
    "location",
    "notes",
    "is_all_day",
)

_FIELD_SCHEMA = """\
- title: string (required) - the event title/name
- date: string (required) - date in YYYY-MM-DD format
- start_time: string (optional) - start time in HH:MM format (24h)
- end_time: string (optional) - end time in HH:MM format (24h)
- location: string (optional) - event location
- notes: string (optional) - additional details
- is_all_day: boolean (optional) - true if this is an all-day event"""


def build_event_prompt(
    text: str,
    custom_context: str = "",
    now: datetime | None = None,
) -> str:
    """Build the extraction prompt for a single event.

    Args:
        text: The text to extract an event from.
        custom_context: Optional user-supplied context (e.g. "I live in
            Berlin, my workday starts at 08:00").  Appended verbatim when
            non-empty.
        now: Override for the current time, for tests.  Defaults to
            :meth:`datetime.now` evaluated on this call.

    Returns:
        The complete prompt string.
    """
    current = now or datetime.now()
    today = current.strftime("%Y-%m-%d")
    weekday = current.strftime("%A")

    prompt = f"""\
Today is {weekday}, {today}.

Extract calendar event information from the following text. Return a JSON object with these fields:
{_FIELD_SCHEMA}

If a date is mentioned relatively (e.g., "tomorrow", "next Monday"), calculate the actual date and return it in YYYY-MM-DD format.
If no time is specified, assume it's an all-day event.
"""

    if custom_context.strip():
        prompt += f"\nAdditional context from the user:\n{custom_context}\n"

    prompt += f"""
Return ONLY valid JSON, no other text.

Text to parse:
{text}"""

    return prompt
