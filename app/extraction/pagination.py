"""Next-page discovery for paginated HTML listings."""

from typing import Optional

from bs4 import BeautifulSoup

from .html_table import resolve_url

NEXT_LINK_TEXTS = frozenset({"next", "next ›", "next »", "›", "»", ">"})


def find_next_page_url(html: str, base_url: str, selector: Optional[str] = None) -> Optional[str]:
    """Locate the "next page" link on a listing page.

    Checks, in order: the explicit selector, an anchor with rel="next", then
    any anchor whose text, aria-label, rel, or class identifies it as a next
    link.

    Args:
        html: Page markup
        base_url: URL of the current page
        selector: Optional CSS selector for the next link

    Returns:
        Absolute URL of the next page, or None when there is none
    """
    soup = BeautifulSoup(html, "html.parser")

    if selector:
        element = soup.select_one(selector)
        if element is not None:
            candidate = resolve_url(element.get("href"), base_url)
            if candidate:
                return candidate

    rel_next = soup.find("a", rel="next")
    if rel_next is not None:
        candidate = resolve_url(rel_next.get("href"), base_url)
        if candidate:
            return candidate

    for anchor in soup.find_all("a"):
        text = " ".join(anchor.get_text(" ").split()).lower()
        aria = (anchor.get("aria-label") or "").lower()
        rel = " ".join(anchor.get("rel") or []).lower()
        classes = " ".join(anchor.get("class") or []).lower()

        is_next = (
            text in NEXT_LINK_TEXTS
            or text.startswith("next ")
            or "next" in aria
            or "next" in rel
            or "next" in classes
        )
        if is_next:
            candidate = resolve_url(anchor.get("href"), base_url)
            if candidate:
                return candidate

    return None
