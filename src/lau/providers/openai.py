"""OpenAI Codex provider definition."""

from lau.providers.base import Provider

# AGENTS.md is shared by several tools, so openai is checked last
OPENAI = Provider(
    key="openai",
    name="OpenAI Codex",
    markers=(".codex", "AGENTS.md"),
)
