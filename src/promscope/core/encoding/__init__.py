"""Encoders for dumped series."""

from promscope.core.encoding.ndjson import encode_dump, encode_observations

__all__ = ["encode_dump", "encode_observations"]
