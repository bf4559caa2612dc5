"""
Parse one catalog page (HTML from page.content()) into answers + correct answer index.

The catalog renders each question as a result table. Answer cells carry
headers="ANTWORT"; a parallel column headers="RICHTIGE_ANTWORT" flags the correct
row with an attribute (name="FARBE" on the live site). Which attribute marks the
row is configurable through MarkerPredicate.
"""
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag


@dataclass(frozen=True)
class MarkerPredicate:
    """Matches a cell whose `attribute` equals `value`. value=None matches on presence alone."""
    attribute: str = "name"
    value: Optional[str] = "FARBE"

    def __call__(self, cell: Tag) -> bool:
        actual = cell.get(self.attribute)
        if actual is None:
            return False
        if self.value is None:
            return True
        if isinstance(actual, list):  # multi-valued attributes such as class
            return self.value in actual
        return actual == self.value


def extract_answers(soup: BeautifulSoup, selector: str) -> List[str]:
    """Text of every answer cell in display order; duplicates and empty cells are kept."""
    return [cell.get_text().strip() for cell in soup.select(selector)]


def find_marked_index(cells: Sequence, predicate: Callable[[Tag], bool]) -> int:
    for i, cell in enumerate(cells):
        if predicate(cell):
            return i
    return -1


def extract_correct_index(soup: BeautifulSoup, selector: str, predicate: Callable[[Tag], bool]) -> int:
    return find_marked_index(soup.select(selector), predicate)


def extract_page(html: str, config) -> Tuple[List[str], int]:
    """Return (answers, correct_index) for the question currently shown."""
    soup = BeautifulSoup(html, "html.parser")
    answers = extract_answers(soup, config.answer_selector)
    correct_index = extract_correct_index(soup, config.marker_selector, config.marker)
    return answers, correct_index
