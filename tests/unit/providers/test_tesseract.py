"""Tests for the Tesseract OCR backend."""

from __future__ import annotations

from unittest.mock import patch

import pytest
import pytesseract
from PIL import Image

from screencal.exceptions import OcrFailed
from screencal.providers.tesseract import TesseractTextRecognizer, correct_text


class TestTesseractTextRecognizer:
    """Tests for the pytesseract call and error mapping."""

    def test_passes_languages_and_engine_config(self) -> None:
        image = Image.new("RGB", (10, 10))

        with patch("pytesseract.image_to_string", return_value="Hello\n") as mock_ocr:
            text = TesseractTextRecognizer(languages="eng+deu").recognize_text(image)

        assert text == "Hello"
        kwargs = mock_ocr.call_args.kwargs
        assert kwargs["lang"] == "eng+deu"
        assert "--oem 1" in kwargs["config"]

    def test_converts_unsupported_modes(self) -> None:
        image = Image.new("RGBA", (10, 10))

        with patch("pytesseract.image_to_string", return_value="x") as mock_ocr:
            TesseractTextRecognizer().recognize_text(image)

        assert mock_ocr.call_args.args[0].mode == "RGB"

    def test_grayscale_passed_through(self) -> None:
        image = Image.new("L", (10, 10))

        with patch("pytesseract.image_to_string", return_value="x") as mock_ocr:
            TesseractTextRecognizer().recognize_text(image)

        assert mock_ocr.call_args.args[0] is image

    def test_empty_result_returned_as_is(self) -> None:
        with patch("pytesseract.image_to_string", return_value="  \n\n"):
            assert TesseractTextRecognizer().recognize_text(Image.new("L", (5, 5))) == ""

    def test_correction_can_be_disabled(self) -> None:
        with patch("pytesseract.image_to_string", return_value=" 10 : 30  a\n"):
            text = TesseractTextRecognizer(correct_text=False).recognize_text(
                Image.new("L", (5, 5))
            )

        assert text == "10 : 30  a"

    def test_missing_binary(self) -> None:
        with patch(
            "pytesseract.image_to_string",
            side_effect=pytesseract.TesseractNotFoundError(),
        ):
            with pytest.raises(OcrFailed, match="not installed"):
                TesseractTextRecognizer().recognize_text(Image.new("L", (5, 5)))

    def test_engine_error(self) -> None:
        with patch(
            "pytesseract.image_to_string",
            side_effect=pytesseract.TesseractError(1, "Failed loading language 'xyz'"),
        ):
            with pytest.raises(OcrFailed):
                TesseractTextRecognizer(languages="xyz").recognize_text(
                    Image.new("L", (5, 5))
                )


class TestCorrectText:
    """Tests for the OCR clean-up rules."""

    def test_ligatures_expanded(self) -> None:
        assert correct_text("Oﬃce ﬁle") == "Office file"

    def test_space_runs_collapsed(self) -> None:
        assert correct_text("Team\t\tsync   at noon") == "Team sync at noon"

    def test_split_times_rejoined(self) -> None:
        assert correct_text("Starts 10 : 30, ends 11 :45") == "Starts 10:30, ends 11:45"

    def test_blank_lines_dropped(self) -> None:
        assert correct_text("  Title  \n\n   \nWhere ") == "Title\nWhere"
