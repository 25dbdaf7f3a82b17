"""Windsurf provider definition."""

from lau.providers.base import Provider

WINDSURF = Provider(
    key="windsurf",
    name="Windsurf",
    markers=(".windsurfrules", ".windsurf"),
)
