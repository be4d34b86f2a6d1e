"""
Placeholder article generator.

Builds a fixed number of templated summaries from a feed's keywords and the
names of its sources. No content is fetched.
"""

from __future__ import annotations

from newsletter_hub.db import FeedRecord, SourceRecord

ARTICLES_PER_FEED = 5
DEFAULT_TOPIC = "innovation"
DEFAULT_SOURCE_NAME = "Independent Research"


def split_keywords(keywords: str) -> list[str]:
    return [k.strip() for k in (keywords or "").split(",") if k.strip()]


def generate_articles(feed: FeedRecord, sources: list[SourceRecord]) -> list[dict]:
    topics = split_keywords(feed.keywords) or [DEFAULT_TOPIC]
    source_names = [s.name for s in sources] or [DEFAULT_SOURCE_NAME]
    articles = []
    for i in range(ARTICLES_PER_FEED):
        topic = topics[i % len(topics)]
        source = source_names[i % len(source_names)]
        articles.append(
            {
                "title": f"{feed.name}: {topic} insight #{i + 1}",
                "summary": (
                    f"A concise overview of how {topic} is shaping the {feed.name} "
                    f"landscape with key takeaways sourced from {source}."
                ),
                "link": f"https://example.com/{feed.id}/{i + 1}",
                "source": source,
            }
        )
    return articles
