"""Claude Code provider definition."""

from lau.providers.base import Provider

CLAUDE = Provider(
    key="claude",
    name="Claude Code",
    markers=("CLAUDE.md", ".claude"),
)
