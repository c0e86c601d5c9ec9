"""Grayscale, contrast and binarization filters for label photos."""

import cv2
import numpy as np

from driver_scan.utils.logger import get_logger

logger = get_logger(__name__)


def to_gray(image: np.ndarray) -> np.ndarray:
    """Convert an image to grayscale if it has color channels.

    Args:
        image: Input image (RGB, RGBA or grayscale).

    Returns:
        Grayscale image.
    """
    if len(image.shape) == 3:
        if image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)
        return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
    return image


def contrast_factor(contrast: float) -> float:
    """Return the linear stretch factor for a contrast setting."""
    return (259 * (contrast + 255)) / (255 * (259 - contrast))


def adjust_contrast(image: np.ndarray, contrast: float = 1.2) -> np.ndarray:
    """Stretch pixel intensities away from mid-gray.

    Args:
        image: Input image.
        contrast: Contrast setting; 0 leaves the image unchanged.

    Returns:
        Contrast-adjusted ``uint8`` image.
    """
    factor = contrast_factor(contrast)
    stretched = factor * (image.astype(np.float32) - 128.0) + 128.0
    logger.debug("Applied contrast stretch (factor=%.4f)", factor)
    return np.clip(stretched, 0, 255).astype(np.uint8)


def binarize_otsu(image: np.ndarray) -> np.ndarray:
    """Binarize an image using Otsu's automatic thresholding.

    Args:
        image: Input image (color or grayscale).

    Returns:
        Binary image with pixel values 0 or 255.
    """
    gray = to_gray(image)
    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    logger.debug("Applied Otsu binarization")
    return binary


def binarize_adaptive(
    image: np.ndarray, block_size: int = 11, c: int = 2
) -> np.ndarray:
    """Binarize an image using adaptive Gaussian thresholding.

    Args:
        image: Input image (color or grayscale).
        block_size: Size of the pixel neighborhood for threshold calculation.
        c: Constant subtracted from the mean.

    Returns:
        Binary image with pixel values 0 or 255.
    """
    gray = to_gray(image)
    result = cv2.adaptiveThreshold(
        gray,
        255,
        cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
        cv2.THRESH_BINARY,
        block_size,
        c,
    )
    logger.debug("Applied adaptive binarization (block=%d, c=%d)", block_size, c)
    return result
