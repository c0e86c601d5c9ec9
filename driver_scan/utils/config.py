"""Configuration management for the driver scanner.

Loads YAML configuration into pydantic models, falling back to defaults
for any section or key that is not provided.
"""

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("configs/config.yaml")


class PreprocessingConfig(BaseModel):
    """Configuration for label image preprocessing."""

    grayscale_enabled: bool = True
    contrast: float = 1.2
    binarize_enabled: bool = False
    binarize_method: Literal["otsu", "adaptive"] = "otsu"


class OCRConfig(BaseModel):
    """Configuration for the Tesseract OCR engine."""

    tesseract_cmd: str | None = None
    lang: str = "kor+eng"
    psm: int = 6


class MatchingConfig(BaseModel):
    """Configuration for the rule table and keyword matching."""

    rules_path: str = "data/drivers.csv"
    header_marker: str = "키워드"
    delimiter: str = Field(default=",", min_length=1, max_length=1)
    anchors: list[str] = Field(default_factory=list)
    normalize: bool = True


class ServerConfig(BaseModel):
    """Bind address for the HTTP API."""

    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
