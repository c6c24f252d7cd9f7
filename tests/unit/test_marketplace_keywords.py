"""Unit tests for item search keyword generation."""

from src.sc_marketplace.domain.keywords import generate_search_keywords


def test_order_and_lowercase() -> None:
    keywords = generate_search_keywords(
        "Capezio 댄스화", "거의 새것 A급", "shoes", brand="Capezio", region="강남", tags=["린디합"]
    )
    assert keywords == ["capezio 댄스화", "capezio", "댄스화", "거의", "새것", "a급", "shoes", "강남", "린디합"]


def test_single_character_description_words_skipped() -> None:
    keywords = generate_search_keywords("신발", "a b cd", "other")
    assert "a" not in keywords
    assert "cd" in keywords


def test_duplicates_removed() -> None:
    keywords = generate_search_keywords("Shoes", "shoes SHOES", "shoes", tags=["shoes"])
    assert keywords == ["shoes"]


def test_optional_parts_absent() -> None:
    assert generate_search_keywords("t", "", "other") == ["t", "other"]
