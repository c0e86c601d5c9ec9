"""Configurable preprocessing applied to label photos before OCR."""

import numpy as np

from driver_scan.utils.config import PreprocessingConfig
from driver_scan.utils.logger import get_logger

from .filters import adjust_contrast, binarize_adaptive, binarize_otsu, to_gray

logger = get_logger(__name__)


class PreprocessingPipeline:
    """Applies grayscale, contrast and optional binarization steps.

    Args:
        config: Preprocessing configuration controlling which steps to apply.
    """

    def __init__(self, config: PreprocessingConfig) -> None:
        self.config = config

    def process(self, image: np.ndarray) -> np.ndarray:
        """Run the enabled preprocessing steps on an image.

        Args:
            image: Input label image.

        Returns:
            Processed image.
        """
        result = image.copy()

        if self.config.grayscale_enabled:
            result = to_gray(result)

        if self.config.contrast:
            result = adjust_contrast(result, self.config.contrast)

        if self.config.binarize_enabled:
            if self.config.binarize_method == "adaptive":
                result = binarize_adaptive(result)
            else:
                result = binarize_otsu(result)

        logger.debug("Preprocessed image to shape %s", result.shape)
        return result
