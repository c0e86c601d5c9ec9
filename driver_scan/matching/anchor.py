"""Anchor-based narrowing of recognized label text.

Label OCR output usually carries printed boilerplate before the address.
Cutting the text at a known place-name anchor keeps that noise out of
keyword matching.
"""

from collections.abc import Sequence

from driver_scan.utils.logger import get_logger

logger = get_logger(__name__)


def extract_focus(text: str, anchors: Sequence[str]) -> str:
    """Return the part of ``text`` that follows the first anchor found.

    Anchors are tried in priority order. The first one present in the text
    is used at its leftmost occurrence, and the remainder after it is
    returned stripped. When no anchor occurs the text is returned unchanged.

    Args:
        text: Recognized text.
        anchors: Anchor phrases in priority order. Empty phrases are ignored.

    Returns:
        Text after the anchor, or the original text.
    """
    if not text:
        return text

    for anchor in anchors:
        if not anchor:
            continue
        index = text.find(anchor)
        if index != -1:
            logger.debug("Anchor '%s' found at offset %d", anchor, index)
            return text[index + len(anchor) :].strip()

    return text
