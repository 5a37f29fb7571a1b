"""
Services package for Programme Feed Service

This package contains the feed parser and the fetch pipeline.
"""
from tvfeed.services.feed_fetch_service import feed_cache, fetch_and_process
from tvfeed.services.feed_parser_service import FeedFormatError, FeedParser, parse_feed_file

__all__ = [
    'FeedFormatError',
    'FeedParser',
    'feed_cache',
    'fetch_and_process',
    'parse_feed_file',
]
