"""
Pad short question images to a minimum height (the OCR service rejects very small images).

Images below --min-height get transparent rows split evenly above and below (odd extra row at the
bottom); everything else is copied byte-for-byte.

Run: python -m oet_catalog.padder [--input scraped] [--output padded] [--min-height 50]
"""
import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import Dict, Iterable, Tuple

from PIL import Image, UnidentifiedImageError

from oet_catalog.config import load_config

logger = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)


def compute_padding(height: int, min_height: int) -> Tuple[int, int]:
    """(top, bottom) rows needed to bring `height` up to `min_height`; (0, 0) if already tall enough."""
    if height >= min_height:
        return 0, 0
    deficit = min_height - height
    top = deficit // 2
    return top, deficit - top


def pad_image(src: Path, dst: Path, min_height: int) -> str:
    """Write the padded (or copied) image to dst. Returns "padded" or "copied"."""
    with Image.open(src) as img:
        top, bottom = compute_padding(img.height, min_height)
        if top or bottom:
            rgba = img.convert("RGBA")
            canvas = Image.new("RGBA", (rgba.width, min_height), TRANSPARENT)
            canvas.paste(rgba, (0, top))
            canvas.save(dst, format="PNG")
            logger.info("Processing %s: adding %spx padding (%spx top, %spx bottom)", src.name, top + bottom, top, bottom)
            return "padded"
        height = img.height
    shutil.copyfile(src, dst)
    logger.info("%s already meets minimum height (%spx)", src.name, height)
    return "copied"


def _matches(path: Path, extensions: Iterable[str]) -> bool:
    suffix = path.suffix.lower()
    return path.is_file() and any(suffix == ext.lower() for ext in extensions)


def pad_folder(input_dir: Path, output_dir: Path, min_height: int, extensions: Iterable[str] = (".png",)) -> Dict[str, int]:
    input_dir, output_dir = Path(input_dir), Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    extensions = tuple(extensions)
    files = sorted(p for p in input_dir.iterdir() if _matches(p, extensions))
    logger.info("Found %s image files to process.", len(files))

    stats = {"padded": 0, "copied": 0, "errors": 0}
    for src in files:
        try:
            action = pad_image(src, output_dir / src.name, min_height)
        except (UnidentifiedImageError, OSError) as e:
            logger.warning("Could not read image metadata for %s: %s", src.name, e)
            stats["errors"] += 1
            continue
        stats[action] += 1
    return stats


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    parser = argparse.ArgumentParser(description="Pad question images to a minimum height.")
    parser.add_argument("--input", type=Path, default=None, help="Folder with scraped images (default ./scraped)")
    parser.add_argument("--output", type=Path, default=None, help="Folder for padded images (default ./padded)")
    parser.add_argument("--min-height", type=int, default=None, help="Minimum height in pixels (default 50)")
    args = parser.parse_args(argv)

    config = load_config(scraped_dir=args.input, padded_dir=args.output, min_height=args.min_height)
    if not config.scraped_dir.is_dir():
        logger.error("Input folder not found: %s", config.scraped_dir)
        return 1
    stats = pad_folder(config.scraped_dir, config.padded_dir, config.min_height, config.image_extensions)

    logger.info("=== Final Stats ===")
    logger.info("Padded: %s", stats["padded"])
    logger.info("Copied unchanged: %s", stats["copied"])
    logger.info("Unreadable: %s", stats["errors"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
