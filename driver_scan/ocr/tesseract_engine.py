"""Tesseract OCR engine wrapper for label text recognition."""

from dataclasses import dataclass

import numpy as np
import pytesseract
from PIL import Image

from driver_scan.exceptions import RecognitionError
from driver_scan.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class OCRResult:
    """Text recognized on a label image."""

    raw_text: str
    text: str
    language: str
    confidence: float


def clean_text(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return " ".join(text.split())


class TesseractEngine:
    """Wrapper around Tesseract OCR.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        lang: Tesseract language string, e.g. ``"kor+eng"``.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        lang: str = "kor+eng",
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.lang = lang

    def extract_text(
        self,
        image: np.ndarray,
        lang: str | None = None,
        psm: int = 6,
    ) -> OCRResult:
        """Recognize the text on an image.

        Args:
            image: Input image as a numpy array.
            lang: Tesseract language string. Defaults to the engine language.
            psm: Tesseract page segmentation mode.

        Returns:
            OCRResult with raw and whitespace-cleaned text.

        Raises:
            RecognitionError: If Tesseract is missing or fails.
        """
        lang = lang or self.lang
        config = f"--psm {psm}"
        pil_image = Image.fromarray(image)

        try:
            raw_text = pytesseract.image_to_string(
                pil_image, lang=lang, config=config
            )
            data = pytesseract.image_to_data(
                pil_image,
                lang=lang,
                config=config,
                output_type=pytesseract.Output.DICT,
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
            logger.error("Tesseract failed: %s", exc)
            raise RecognitionError(f"OCR failed: {exc}") from exc

        confidences = [
            float(conf)
            for conf, word in zip(data["conf"], data["text"])
            if float(conf) > 0 and word.strip()
        ]
        avg_conf = sum(confidences) / len(confidences) / 100.0 if confidences else 0.0

        text = clean_text(raw_text)
        logger.info(
            "OCR recognized %d words (%d chars) with average confidence %.2f",
            len(confidences),
            len(text),
            avg_conf,
        )
        return OCRResult(
            raw_text=raw_text,
            text=text,
            language=lang,
            confidence=avg_conf,
        )
