"""Configuration loading tests."""
from pathlib import Path

import pytest

from oet_catalog import config as config_module
from oet_catalog.config import ConfigError, load_config, load_ocr_settings
from oet_catalog.rate_limit import MinIntervalLimiter


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    monkeypatch.setattr(config_module, "load_dotenv", lambda *a, **k: False)
    for name in ("DOCUMENTINTELLIGENCE_ENDPOINT", "DOCUMENTINTELLIGENCE_API_KEY", "OET_IMAGE_BASE_URL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    cfg = load_config()
    assert cfg.max_questions == 320
    assert cfg.min_height == 50
    assert cfg.scraped_dir == Path("scraped")
    assert cfg.padded_dir == Path("padded")
    assert (cfg.first_id, cfg.last_id) == (1, 320)
    assert cfg.marker.attribute == "name"
    assert cfg.marker.value == "FARBE"
    assert cfg.image_base_url is None


def test_overrides_ignore_none():
    cfg = load_config(max_questions=5, min_height=None, padded_dir=Path("out"))
    assert cfg.max_questions == 5
    assert cfg.min_height == 50
    assert cfg.padded_dir == Path("out")


def test_unknown_override_rejected():
    with pytest.raises(ConfigError):
        load_config(colour="blue")


def test_image_base_url_from_env(monkeypatch):
    monkeypatch.setenv("OET_IMAGE_BASE_URL", "https://raw.example.org/padded/")
    assert load_config().image_base_url == "https://raw.example.org/padded"


def test_missing_ocr_credentials_is_fatal(monkeypatch):
    monkeypatch.setenv("DOCUMENTINTELLIGENCE_ENDPOINT", "https://ocr.example.org")
    with pytest.raises(ConfigError):
        load_ocr_settings()


def test_ocr_settings_from_env(monkeypatch):
    monkeypatch.setenv("DOCUMENTINTELLIGENCE_ENDPOINT", "https://ocr.example.org/")
    monkeypatch.setenv("DOCUMENTINTELLIGENCE_API_KEY", "k")
    settings = load_ocr_settings()
    assert settings.endpoint == "https://ocr.example.org"
    assert settings.key == "k"
    assert settings.model_id == "prebuilt-read"


def test_enricher_cli_exits_before_work_without_credentials(tmp_path):
    from oet_catalog.enricher import main

    scraped = tmp_path / "scraped"
    scraped.mkdir()
    (scraped / "1.json").write_text('{"answers": [], "correctIndex": -1}', encoding="utf-8")
    before = (scraped / "1.json").read_bytes()

    assert main(["--scraped", str(scraped)]) == 1
    assert (scraped / "1.json").read_bytes() == before


def test_limiter_rejects_negative_interval():
    with pytest.raises(ValueError):
        MinIntervalLimiter(-1)


def test_limiter_zero_interval_never_sleeps():
    slept = []
    limiter = MinIntervalLimiter(0, clock=lambda: 0.0, sleep=slept.append)
    limiter.mark()
    assert limiter.wait() == 0.0
    assert slept == []


def test_limiter_only_waits_for_remaining_time():
    now = [0.0]
    slept = []
    limiter = MinIntervalLimiter(3.0, clock=lambda: now[0], sleep=slept.append)
    assert limiter.wait() == 0.0
    limiter.mark()
    now[0] = 2.0
    assert limiter.wait() == pytest.approx(1.0)
    now[0] = 10.0
    assert limiter.wait() == 0.0
    assert slept == [pytest.approx(1.0)]
