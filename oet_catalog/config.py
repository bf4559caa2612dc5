"""Pipeline configuration. Values come from defaults, .env / environment, and CLI overrides."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from oet_catalog.extraction import MarkerPredicate

BASE_URL = "https://oet.bamf.de/ords/oetut/f?p=514:1::::::"
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"

ENDPOINT_ENV = "DOCUMENTINTELLIGENCE_ENDPOINT"
KEY_ENV = "DOCUMENTINTELLIGENCE_API_KEY"
IMAGE_BASE_URL_ENV = "OET_IMAGE_BASE_URL"


class ConfigError(ValueError):
    """Required configuration is missing; raised before any work starts."""


@dataclass
class PipelineConfig:
    # Catalog navigation
    base_url: str = BASE_URL
    state_select: str = "#P1_BUL_ID"
    state_value: str = "9"
    catalog_button: str = 'input[value="Zum Fragenkatalog"]'
    answer_selector: str = '.t3data[headers="ANTWORT"]'
    marker_selector: str = '.t3data[headers="RICHTIGE_ANTWORT"]'
    marker: MarkerPredicate = field(default_factory=MarkerPredicate)
    image_selector: str = "#P30_AUFGABENSTELLUNG_BILD > img"
    next_selector: str = 'input[name="GET_NEXT_ID"]'
    max_questions: int = 320
    headless: bool = True
    page_timeout_ms: int = 60000
    user_agent: str = USER_AGENT

    # File store
    scraped_dir: Path = Path("scraped")
    padded_dir: Path = Path("padded")

    # Padding
    min_height: int = 50
    image_extensions: Tuple[str, ...] = (".png",)

    # Enrichment
    first_id: int = 1
    last_id: int = 320
    ocr_interval: float = 3.0
    image_base_url: Optional[str] = None


@dataclass(frozen=True)
class OcrSettings:
    endpoint: str
    key: str
    model_id: str = "prebuilt-read"
    api_version: str = "2024-11-30"


def load_config(**overrides) -> PipelineConfig:
    """Build a PipelineConfig from .env / environment, then apply non-None overrides."""
    load_dotenv()
    config = PipelineConfig()
    image_base_url = os.environ.get(IMAGE_BASE_URL_ENV)
    if image_base_url:
        config.image_base_url = image_base_url.rstrip("/")
    for name, value in overrides.items():
        if value is None:
            continue
        if not hasattr(config, name):
            raise ConfigError(f"Unknown config field: {name}")
        setattr(config, name, value)
    return config


def load_ocr_settings() -> OcrSettings:
    load_dotenv()
    endpoint = os.environ.get(ENDPOINT_ENV)
    key = os.environ.get(KEY_ENV)
    if not endpoint or not key:
        raise ConfigError(f"{ENDPOINT_ENV} and {KEY_ENV} must be set")
    return OcrSettings(endpoint=endpoint.rstrip("/"), key=key)
