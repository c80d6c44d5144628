"""On-device text recognition with Tesseract.

Uses ``pytesseract`` with the LSTM engine (favours accuracy over speed)
and a multi-language hint list.  Output goes through a few deterministic
clean-up rules for common OCR artefacts.
"""

from __future__ import annotations

import logging
import re

import pytesseract
from PIL import Image

from screencal.exceptions import OcrFailed

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Tesseract"

DEFAULT_LANGUAGES = "eng+fra+deu+spa+ita"

# --oem 1: LSTM engine only.  --psm 3: fully automatic page segmentation.
_TESSERACT_CONFIG = "--oem 1 --psm 3"

_LIGATURES = {
    "ﬀ": "ff",
    "ﬁ": "fi",
    "ﬂ": "fl",
    "ﬃ": "ffi",
    "ﬄ": "ffl",
}
_SPACE_RUNS = re.compile(r"[ \t\u00a0]+")
# "10 : 30" -> "10:30", a frequent split in screenshot text.
_SPLIT_TIME = re.compile(r"\b(\d{1,2}) ?: ?(\d{2})\b")


class TesseractTextRecognizer:
    """Local OCR through the Tesseract engine.

    Args:
        languages: ``+``-separated Tesseract language codes.
        correct_text: Apply the clean-up rules in :func:`correct_text`.
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        languages: str = DEFAULT_LANGUAGES,
        correct_text: bool = True,
    ) -> None:
        self._languages = languages
        self._correct_text = correct_text

    def recognize_text(self, image: Image.Image) -> str:
        try:
            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
        except (OSError, ValueError) as exc:
            raise OcrFailed(f"Failed to convert image: {exc}") from exc

        logger.info("Recognizing text with Tesseract (lang=%s)", self._languages)
        try:
            raw = pytesseract.image_to_string(
                image, lang=self._languages, config=_TESSERACT_CONFIG
            )
        except pytesseract.TesseractNotFoundError as exc:
            raise OcrFailed(
                "Tesseract is not installed or not on PATH"
            ) from exc
        except pytesseract.TesseractError as exc:
            raise OcrFailed(str(exc)) from exc

        text = correct_text(raw) if self._correct_text else raw.strip()
        logger.info("Tesseract recognized %d character(s)", len(text))
        return text


def correct_text(raw: str) -> str:
    """Clean common OCR artefacts from *raw*.

    - expands typographic ligatures (``ﬁ`` -> ``fi``);
    - collapses runs of spaces and tabs;
    - re-joins times split around the colon (``10 : 30``);
    - drops blank lines and trims every line.
    """
    text = raw
    for ligature, replacement in _LIGATURES.items():
        text = text.replace(ligature, replacement)

    lines = []
    for line in text.splitlines():
        line = _SPACE_RUNS.sub(" ", line).strip()
        if not line:
            continue
        lines.append(_SPLIT_TIME.sub(r"\1:\2", line))
    return "\n".join(lines)
