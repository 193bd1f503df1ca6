"""Fetch sources implementing the source ports."""

from promscope.adapters.sources.http import AsyncHttpxSource, HttpxSource

__all__ = ["AsyncHttpxSource", "HttpxSource"]
