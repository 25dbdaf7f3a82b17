"""Cursor provider definition."""

from lau.providers.base import Provider

CURSOR = Provider(
    key="cursor",
    name="Cursor",
    markers=(".cursorrules", ".cursor"),
)
