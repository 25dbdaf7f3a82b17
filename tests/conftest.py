"""Shared fixtures for building template corpora on disk."""

from pathlib import Path

import pytest


def make_template(
    root: Path,
    identifier: str,
    providers: dict[str, dict[str, str]],
    readme: str | None = "# Title\n\nA test template.\n",
) -> Path:
    """Create a template directory with provider subtrees.

    `providers` maps provider key -> {relative path: content}. An empty
    dict creates an empty provider directory.
    """
    template_dir = root / identifier
    template_dir.mkdir(parents=True)
    if readme is not None:
        (template_dir / "README.md").write_text(readme)
    for provider, files in providers.items():
        provider_dir = template_dir / provider
        provider_dir.mkdir()
        for relative_path, content in files.items():
            target = provider_dir / relative_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
    return template_dir


@pytest.fixture
def corpus(tmp_path: Path) -> Path:
    """Corpus with security/redteam-expert and pythonic-expert."""
    root = tmp_path / "corpus"
    root.mkdir()
    make_template(
        root,
        "security/redteam-expert",
        {
            "claude": {".claude/agents/redteam.md": "claude redteam\n"},
            "default": {"docs/redteam.md": "default redteam\n"},
        },
        readme="# Red Team Expert\n\nAttacker's-eye reviewer.\n",
    )
    make_template(
        root,
        "pythonic-expert",
        {
            "openai": {"AGENTS.md": "openai pythonic\n"},
            "default": {
                "docs/pythonic.md": "default pythonic\n",
                "docs/style/naming.md": "naming rules\n",
            },
            "windsurf": {".windsurf/rules/pythonic.md": "windsurf pythonic\n"},
        },
        readme="# Pythonic Expert\n\nIdiomatic Python reviewer.\n",
    )
    return root


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Empty destination project directory."""
    dest = tmp_path / "project"
    dest.mkdir()
    return dest
