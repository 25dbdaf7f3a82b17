"""Google Antigravity provider definition."""

from lau.providers.base import Provider

ANTIGRAVITY = Provider(
    key="antigravity",
    name="Antigravity",
    markers=(".agent",),
)
