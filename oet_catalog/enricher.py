"""
Fill in the missing "question" field of scraped records via OCR of the padded question image.

Records that already have a question are left alone and cost no OCR call, so the script can be
re-run over the same range until every record is complete.

Run: python -m oet_catalog.enricher [--first 1] [--last 320] [--interval 3]
Needs DOCUMENTINTELLIGENCE_ENDPOINT and DOCUMENTINTELLIGENCE_API_KEY (env or .env).
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Dict

from oet_catalog.config import ConfigError, PipelineConfig, load_config, load_ocr_settings
from oet_catalog.ocr import DocumentIntelligenceClient, first_line
from oet_catalog.rate_limit import MinIntervalLimiter
from oet_catalog.records import Complete, RecordStore

logger = logging.getLogger(__name__)

Recognizer = Callable[[int], str]

MISSING = "missing"
SKIPPED = "skipped"
ENRICHED = "enriched"


def _limited(limiter: MinIntervalLimiter, call: Callable[[], str]) -> str:
    """Run one external call, spaced from the previous one by the limiter."""
    limiter.wait()
    try:
        return call()
    finally:
        limiter.mark()


def make_recognizer(config: PipelineConfig, client: DocumentIntelligenceClient, limiter: MinIntervalLimiter) -> Recognizer:
    """OCR by public URL when image_base_url is configured, otherwise upload the local padded file."""
    if config.image_base_url:
        base = config.image_base_url.rstrip("/")

        def recognize_url(record_id: int) -> str:
            url = f"{base}/{record_id}.png"
            return _limited(limiter, lambda: client.analyze_url_source(url))

        return recognize_url

    padded = RecordStore(config.padded_dir)

    def recognize_file(record_id: int) -> str:
        path = padded.path_for(record_id, ".png")
        if not path.is_file():
            raise FileNotFoundError(f"Padded image not found: {path}")
        data = path.read_bytes()
        return _limited(limiter, lambda: client.analyze_bytes(data))

    return recognize_file


class Enricher:
    def __init__(self, store: RecordStore, recognizer: Recognizer):
        self.store = store
        self.recognizer = recognizer
        self.stats = {ENRICHED: 0, SKIPPED: 0, MISSING: 0, "errors": 0}

    def enrich_one(self, record_id: int) -> str:
        if not self.store.exists(record_id):
            logger.info("Record %s not found, skipping", record_id)
            return MISSING
        record = self.store.load(record_id)
        if isinstance(record.state, Complete):
            logger.info("Record %s already has a question, skipping", record_id)
            return SKIPPED

        text = self.recognizer(record_id)
        question = first_line(text)
        if not question:
            raise ValueError(f"no text recognized for record {record_id}")
        record.question = question
        self.store.save(record)
        logger.info("Record %s: %s", record_id, record.question)
        return ENRICHED

    def run(self, first: int, last: int) -> Dict[str, int]:
        """Enrich ids first..last inclusive. A failure on one id is logged and the loop continues."""
        for record_id in range(first, last + 1):
            try:
                outcome = self.enrich_one(record_id)
            except Exception as e:
                logger.warning("Record %s failed: %s", record_id, e)
                self.stats["errors"] += 1
                continue
            self.stats[outcome] += 1
        return self.stats


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    parser = argparse.ArgumentParser(description="OCR question text into scraped records that lack it.")
    parser.add_argument("--first", type=int, default=None, help="First record id (default 1)")
    parser.add_argument("--last", type=int, default=None, help="Last record id, inclusive (default 320)")
    parser.add_argument("--scraped", type=Path, default=None, help="Record folder (default ./scraped)")
    parser.add_argument("--padded", type=Path, default=None, help="Padded image folder (default ./padded)")
    parser.add_argument("--interval", type=float, default=None, help="Minimum seconds between OCR calls (default 3)")
    parser.add_argument("--image-base-url", default=None, help="Public URL prefix of the padded images")
    args = parser.parse_args(argv)

    try:
        settings = load_ocr_settings()
        config = load_config(
            first_id=args.first,
            last_id=args.last,
            scraped_dir=args.scraped,
            padded_dir=args.padded,
            ocr_interval=args.interval,
            image_base_url=args.image_base_url,
        )
    except ConfigError as e:
        logger.error("%s", e)
        return 1

    client = DocumentIntelligenceClient(settings)
    enricher = Enricher(
        RecordStore(config.scraped_dir),
        make_recognizer(config, client, MinIntervalLimiter(config.ocr_interval)),
    )
    stats = enricher.run(config.first_id, config.last_id)

    logger.info("=== Final Stats ===")
    logger.info("Enriched: %s", stats[ENRICHED])
    logger.info("Already complete: %s", stats[SKIPPED])
    logger.info("Missing records: %s", stats[MISSING])
    logger.info("Errors: %s", stats["errors"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
