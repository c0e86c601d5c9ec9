"""Label image loading, preprocessing and recognition.

Decodes an uploaded photo or a file on disk, then preprocesses it and runs
Tesseract OCR on it. Both steps are blocking and run in worker threads.
"""

import io
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from driver_scan.exceptions import RecognitionError
from driver_scan.preprocessing.pipeline import PreprocessingPipeline
from driver_scan.utils.config import AppConfig
from driver_scan.utils.logger import get_logger

from .tesseract_engine import OCRResult, TesseractEngine

logger = get_logger(__name__)


class LabelReader:
    """Reads the text printed on a label photo.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.preprocessing = PreprocessingPipeline(config.preprocessing)
        self.ocr_engine = TesseractEngine(
            tesseract_cmd=config.ocr.tesseract_cmd,
            lang=config.ocr.lang,
        )

    def recognize(self, image: np.ndarray) -> OCRResult:
        """Preprocess a decoded label image and recognize its text.

        Args:
            image: Label image as returned by :meth:`load_image`.

        Returns:
            OCR result for the image.

        Raises:
            RecognitionError: If OCR fails.
        """
        processed = self.preprocessing.process(image)
        return self.ocr_engine.extract_text(processed, psm=self.config.ocr.psm)

    @staticmethod
    def load_image(source: Path | bytes) -> np.ndarray:
        """Decode an image from a file path or bytes into an RGB array.

        Args:
            source: Path or raw bytes of the image.

        Returns:
            Image as a ``uint8`` numpy array.

        Raises:
            RecognitionError: If the data is not a readable image.
        """
        try:
            if isinstance(source, bytes):
                img = Image.open(io.BytesIO(source))
            else:
                img = Image.open(Path(source))
            logger.debug("Decoding %dx%d %s image", img.width, img.height, img.format)
            return np.array(img.convert("RGB"))
        except (OSError, UnidentifiedImageError, Image.DecompressionBombError) as exc:
            raise RecognitionError(f"Cannot decode image: {exc}") from exc
