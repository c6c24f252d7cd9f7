"""Search keywords stored with each item (lower-cased, de-duplicated, ordered)."""

from collections.abc import Iterable


def generate_search_keywords(
    title: str,
    description: str,
    category: str,
    brand: str | None = None,
    region: str | None = None,
    tags: Iterable[str] = (),
) -> list[str]:
    keywords: dict[str, None] = {}

    def add(word: str) -> None:
        if word:
            keywords.setdefault(word.lower(), None)

    add(title)
    for word in title.split(" "):
        add(word)
    # single characters from the description are noise
    for word in description.split(" "):
        if len(word) > 1:
            add(word)
    add(category)
    if brand:
        add(brand)
    if region:
        add(region)
    for tag in tags:
        add(tag)
    return list(keywords)
