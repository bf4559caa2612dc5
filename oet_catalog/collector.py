"""
Collect the BAMF "Leben in Deutschland" question catalog with Playwright.

Flow: open start page -> pick the federal state in #P1_BUL_ID -> "Zum Fragenkatalog" ->
then for each question page: read answers + correct marker (BeautifulSoup on page.content()),
write <n>.json, download the question image to <n>.png, click "nächste Aufgabe".
The loop ends at --max-questions or when the page has no next button.

Run: python -m oet_catalog.collector [--max-questions 320] [--out scraped] [--show-browser]
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

import requests

from oet_catalog.config import PipelineConfig, load_config
from oet_catalog.extraction import extract_page
from oet_catalog.records import Record, RecordStore

logger = logging.getLogger(__name__)

IMAGE_TIMEOUT = 30


class Collector:
    def __init__(self, config: PipelineConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.store = RecordStore(config.scraped_dir)
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": config.user_agent})
        self.stats = {"questions": 0, "images": 0, "missing_images": 0}

    def open_catalog(self, page) -> None:
        """Navigate from the start page into the question catalog for the configured state."""
        cfg = self.config
        logger.info("Navigating to %s...", cfg.base_url)
        page.goto(cfg.base_url, wait_until="networkidle", timeout=cfg.page_timeout_ms)
        page.wait_for_selector(cfg.state_select)
        page.select_option(cfg.state_select, cfg.state_value)
        logger.info("Selected option with value %s from %s", cfg.state_value, cfg.state_select)
        page.wait_for_selector(cfg.catalog_button)
        with page.expect_navigation(wait_until="networkidle", timeout=cfg.page_timeout_ms):
            page.click(cfg.catalog_button)
        logger.info("Opened question catalog")

    def fetch_image(self, url: str) -> bytes:
        response = self.session.get(url, timeout=IMAGE_TIMEOUT)
        response.raise_for_status()
        return response.content

    def _save_image(self, page, count: int) -> None:
        img = page.query_selector(self.config.image_selector)
        if not img:
            logger.info("  Image element not found")
            self.stats["missing_images"] += 1
            return
        src = img.evaluate("img => img.src")
        data = self.fetch_image(src)
        path = self.store.save_image(count, data)
        self.stats["images"] += 1
        logger.info("  Image saved to %s", path)

    def collect(self, page) -> int:
        """
        Walk the catalog from the current page. Returns the number of records written.

        Any exception aborts the walk; files from earlier iterations are left as they are.
        """
        cfg = self.config
        self.store.ensure_dir()
        count = 0
        while count < cfg.max_questions:
            count += 1
            logger.info("Processing question %s...", count)

            answers, correct_index = extract_page(page.content(), cfg)
            path = self.store.save(Record(id=count, answers=answers, correct_index=correct_index))
            self.stats["questions"] += 1
            logger.info("  Question data saved to %s (%s answers, correct=%s)", path, len(answers), correct_index)

            self._save_image(page, count)

            next_button = page.query_selector(cfg.next_selector)
            if not next_button:
                logger.info("Next task button not found, stopping after question %s.", count)
                break
            with page.expect_navigation(wait_until="networkidle", timeout=cfg.page_timeout_ms):
                next_button.click()
        return count

    def run(self) -> int:
        """Launch chromium, open the catalog and collect. Browser is closed on success or failure."""
        from playwright.sync_api import sync_playwright

        with sync_playwright() as p:
            browser = p.chromium.launch(headless=self.config.headless)
            context = browser.new_context(user_agent=self.config.user_agent)
            context.set_default_timeout(self.config.page_timeout_ms)
            try:
                page = context.new_page()
                self.open_catalog(page)
                return self.collect(page)
            finally:
                context.close()
                browser.close()
                logger.info("Browser closed")


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    parser = argparse.ArgumentParser(description="Scrape the BAMF question catalog into numbered JSON/PNG files.")
    parser.add_argument("--max-questions", type=int, default=None, help="Iteration cap (default 320)")
    parser.add_argument("--out", type=Path, default=None, help="Output folder (default ./scraped)")
    parser.add_argument("--state", default=None, help="Value of the federal-state dropdown (default 9)")
    parser.add_argument("--url", default=None, help="Start page URL")
    parser.add_argument("--show-browser", action="store_true", help="Run chromium with a visible window")
    args = parser.parse_args(argv)

    config = load_config(
        max_questions=args.max_questions,
        scraped_dir=args.out,
        state_value=args.state,
        base_url=args.url,
        headless=False if args.show_browser else None,
    )
    collector = Collector(config)
    try:
        collector.run()
    except Exception as e:
        logger.error("Collection aborted: %s", e)
        return 1
    finally:
        logger.info("=== Final Stats ===")
        logger.info("Questions written: %s", collector.stats["questions"])
        logger.info("Images saved: %s", collector.stats["images"])
        logger.info("Pages without image: %s", collector.stats["missing_images"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
