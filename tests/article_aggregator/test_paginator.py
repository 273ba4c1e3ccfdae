"""
Tests for the in-memory paginator and the Page bookkeeping.
"""

import pytest

from src.article_aggregator.services.paginator import build_page, page_offset, paginate


@pytest.fixture
def articles(make_article):
    return [make_article(url=f"https://news.example.com/{i}") for i in range(5)]


class TestPaginate:

    def test_pages_reconstruct_sequence(self, articles):
        collected = []
        for page_number in (1, 2, 3):
            page = paginate(articles, page_number, 2)
            assert page.total == 5
            collected.extend(page.items)

        assert [a.url for a in collected] == [a.url for a in articles]

    def test_bookkeeping(self, articles):
        page = paginate(articles, 2, 2)

        assert [a.url for a in page.items] == ["https://news.example.com/2", "https://news.example.com/3"]
        assert page.page == 2
        assert page.per_page == 2
        assert page.last_page == 3
        assert page.from_item == 3
        assert page.to_item == 4

    def test_last_partial_page(self, articles):
        page = paginate(articles, 3, 2)

        assert len(page.items) == 1
        assert page.from_item == 5
        assert page.to_item == 5

    @pytest.mark.parametrize("page_number", [0, -3])
    def test_page_below_one_is_first_page(self, articles, page_number):
        page = paginate(articles, page_number, 2)

        assert page.page == 1
        assert [a.url for a in page.items] == [a.url for a in articles[:2]]

    def test_page_past_end_is_empty_with_total(self, articles):
        page = paginate(articles, 10, 2)

        assert page.items == []
        assert page.total == 5
        assert page.from_item == 0
        assert page.to_item == 0

    def test_empty_sequence(self):
        page = paginate([], 1, 10)

        assert page.items == []
        assert page.total == 0
        assert page.last_page == 1


class TestPageOffset:

    def test_offset(self):
        assert page_offset(1, 10) == 0
        assert page_offset(3, 10) == 20

    def test_invalid_per_page(self):
        with pytest.raises(ValueError):
            page_offset(1, 0)


def test_build_page_dump_shape(make_article):
    page = build_page([make_article()], total=11, page=2, per_page=10)

    dumped = page.model_dump()

    assert dumped["total"] == 11
    assert dumped["last_page"] == 2
    assert dumped["from_item"] == 11
    assert dumped["to_item"] == 11
    assert dumped["items"][0]["published_at"] == "2024-03-01 10:00:00"
