"""Term-frequency keyword search over crawled pages.

No inverted index is kept; each query scores every page directly.

Scoring
-------
The query is tokenised exactly like extraction-time keywords (case-folded
alphanumeric runs longer than two characters).  A page's score is the sum,
over every query token, of how many times that token occurs as a substring of
the case-folded ``title + " " + content``, so ``accessibility`` also counts
inside ``accessibilityLabel``.  Repeated query tokens count again.  There is
no length normalisation and no inverse-document-frequency weighting.
"""

from __future__ import annotations

from typing import List, Sequence

from docindex.crawler.extractor import tokenize
from docindex.crawler.models import Page, SearchResult


def query_terms(query: str) -> List[str]:
    """Query tokens in query order, repeats included."""
    return tokenize(query)


def score_page(page: Page, terms: Sequence[str]) -> int:
    text = f"{page.title} {page.content}".casefold()
    return sum(text.count(t) for t in terms)


def search(pages: Sequence[Page], query: str, limit: int = 50) -> List[SearchResult]:
    """Return up to *limit* pages matching *query*, best first.

    Pages scoring 0 are dropped.  Equal scores keep corpus order.
    """
    terms = query_terms(query)
    if not terms or limit <= 0:
        return []

    results: List[SearchResult] = []
    for page in pages:
        score = score_page(page, terms)
        if score > 0:
            results.append(SearchResult(page=page, score=score))

    # sorted() is stable, so ties stay in corpus order.
    results = sorted(results, key=lambda r: r.score, reverse=True)
    return results[:limit]
