"""
Report on the record store: how many records are complete, which ids are missing from the 1..N run.

Run: python -m oet_catalog.status [--scraped scraped] [--padded padded]
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, List

from oet_catalog.config import load_config
from oet_catalog.records import Complete, RecordStore

logger = logging.getLogger(__name__)


def find_gaps(ids: Iterable[int]) -> List[int]:
    """Ids missing from 1..max(ids)."""
    present = set(ids)
    if not present:
        return []
    return [i for i in range(1, max(present) + 1) if i not in present]


def _image_ids(directory: Path) -> List[int]:
    if not directory.is_dir():
        return []
    return sorted(int(p.stem) for p in directory.iterdir() if p.suffix.lower() == ".png" and p.stem.isdigit())


def summarize(store: RecordStore, padded_dir: Path) -> Dict:
    states = store.scan()
    complete = sum(1 for s in states.values() if isinstance(s, Complete))
    return {
        "records": len(states),
        "complete": complete,
        "incomplete": len(states) - complete,
        "images": len(_image_ids(store.directory)),
        "padded": len(_image_ids(Path(padded_dir))),
        "gaps": find_gaps(store.ids()),
    }


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    parser = argparse.ArgumentParser(description="Summarize scraped/padded folders.")
    parser.add_argument("--scraped", type=Path, default=None, help="Record folder (default ./scraped)")
    parser.add_argument("--padded", type=Path, default=None, help="Padded image folder (default ./padded)")
    args = parser.parse_args(argv)

    config = load_config(scraped_dir=args.scraped, padded_dir=args.padded)
    summary = summarize(RecordStore(config.scraped_dir), config.padded_dir)

    logger.info("Records: %s (complete %s, incomplete %s)", summary["records"], summary["complete"], summary["incomplete"])
    logger.info("Images: %s scraped, %s padded", summary["images"], summary["padded"])
    if summary["gaps"]:
        logger.warning("Missing record ids: %s", ", ".join(str(i) for i in summary["gaps"]))
    else:
        logger.info("Record ids are contiguous")
    return 0


if __name__ == "__main__":
    sys.exit(main())
