"""Template corpus discovery and lookup."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from lau.errors import AmbiguousIdentifierError, CorpusError, TemplateNotFoundError
from lau.providers import DEFAULT_PROVIDER, KNOWN_PROVIDER_KEYS
from lau.templates.base import (
    ProviderSubtree,
    Template,
    TemplateFile,
    ValidationWarning,
)

logger = logging.getLogger(__name__)

# Constants
DESCRIPTION_FILENAME = "README.md"

# (category, name, directory)
TemplateEntry = tuple[str | None, str, Path]


def _is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def _subdirs(path: Path) -> list[Path]:
    return sorted(
        item for item in path.iterdir() if item.is_dir() and not _is_hidden(item)
    )


def _has_provider_subdir(subdirs: list[Path]) -> bool:
    return any(d.name in KNOWN_PROVIDER_KEYS for d in subdirs)


def _looks_like_template(path: Path) -> bool:
    return (path / DESCRIPTION_FILENAME).is_file() or _has_provider_subdir(
        _subdirs(path)
    )


def is_template_dir(path: Path) -> bool:
    """Tell a template directory apart from a category directory.

    A template has a known provider subdirectory, or no subdirectories at
    all. A directory whose subdirectories look like templates groups them.
    Otherwise a README.md marks a template that ships only custom
    providers.
    """
    subdirs = _subdirs(path)
    if not subdirs or _has_provider_subdir(subdirs):
        return True
    if any(_looks_like_template(d) for d in subdirs):
        return False
    return (path / DESCRIPTION_FILENAME).is_file()


def discover_template_dirs(corpus_root: Path) -> list[TemplateEntry]:
    """Discover template directories under a corpus root.

    Supports bare templates and one level of category directories.
    Returns entries sorted by category then name, bare templates first.
    """
    entries: list[TemplateEntry] = []
    if not corpus_root.is_dir():
        return entries

    for item in _subdirs(corpus_root):
        if is_template_dir(item):
            entries.append((None, item.name, item))
            continue
        for child in _subdirs(item):
            entries.append((item.name, child.name, child))

    entries.sort(key=lambda e: (e[0] or "", e[1]))
    return entries


def read_description(readme: Path) -> str:
    """Extract a one-paragraph description from a README.

    Uses the first paragraph that is not a heading, falling back to the
    first heading's text.
    """
    text = readme.read_text(encoding="utf-8")
    paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]

    for paragraph in paragraphs:
        if not paragraph.startswith("#"):
            return " ".join(line.strip() for line in paragraph.splitlines())

    for paragraph in paragraphs:
        return paragraph.splitlines()[0].lstrip("#").strip()

    return ""


def collect_files(subtree_dir: Path) -> tuple[TemplateFile, ...]:
    """Collect every file of a subtree in sorted relative-path order."""
    files = [
        TemplateFile(
            relative_path=path.relative_to(subtree_dir).as_posix(),
            source=path,
        )
        for path in subtree_dir.rglob("*")
        if path.is_file()
    ]
    return tuple(sorted(files, key=lambda f: f.relative_path))


def load_subtrees(template_dir: Path) -> dict[str, ProviderSubtree]:
    """Load all non-empty provider subtrees of a template directory.

    Empty provider directories count as absent.
    """
    subtrees: dict[str, ProviderSubtree] = {}
    for subdir in _subdirs(template_dir):
        files = collect_files(subdir)
        if not files:
            logger.debug("Ignoring empty provider directory %s", subdir)
            continue
        subtrees[subdir.name] = ProviderSubtree(
            provider=subdir.name, files=files, source=subdir
        )
    return subtrees


def validate_template_dir(
    template_dir: Path, subtrees: dict[str, ProviderSubtree] | None = None
) -> str | None:
    """Return why a template directory is invalid, or None if it is valid.

    Pass already loaded `subtrees` to avoid walking the directory again.
    """
    if subtrees is None:
        subtrees = load_subtrees(template_dir)

    problems = []
    if not (template_dir / DESCRIPTION_FILENAME).is_file():
        problems.append(f"missing {DESCRIPTION_FILENAME}")
    if DEFAULT_PROVIDER not in subtrees:
        problems.append(f"missing '{DEFAULT_PROVIDER}' provider subtree")

    if problems:
        return " and ".join(problems)
    return None


def _build_template(
    template_dir: Path,
    category: str | None,
    subtrees: dict[str, ProviderSubtree],
) -> Template:
    return Template(
        name=template_dir.name,
        description=read_description(template_dir / DESCRIPTION_FILENAME),
        subtrees=subtrees,
        category=category,
        source=template_dir,
    )


def load_template_from_dir(
    template_dir: Path, category: str | None = None
) -> Template | None:
    """Load a Template from a template directory.

    Returns None if the directory fails validation.
    """
    subtrees = load_subtrees(template_dir)
    if validate_template_dir(template_dir, subtrees) is not None:
        return None
    return _build_template(template_dir, category, subtrees)


def _qualify(category: str | None, name: str) -> str:
    return f"{category}/{name}" if category else name


class TemplateListing:
    """Lazy, restartable view over the valid templates of a corpus.

    Each iteration rescans the corpus. Invalid templates are skipped and
    recorded in `warnings`, which reflects the most recent iteration.
    """

    def __init__(self, corpus_root: Path) -> None:
        self._corpus_root = corpus_root
        self.warnings: list[ValidationWarning] = []

    def __iter__(self) -> Iterator[Template]:
        self.warnings = []
        for category, name, template_dir in discover_template_dirs(self._corpus_root):
            subtrees = load_subtrees(template_dir)
            reason = validate_template_dir(template_dir, subtrees)
            if reason is not None:
                warning = ValidationWarning(
                    identifier=_qualify(category, name),
                    reason=reason,
                    source=template_dir,
                )
                logger.info("Skipping invalid template %s", warning)
                self.warnings.append(warning)
                continue
            yield _build_template(template_dir, category, subtrees)


class TemplateRegistry:
    """Addressable, validated view of one template corpus.

    Nothing is cached: every call reads the corpus afresh.
    """

    def __init__(self, corpus_root: Path) -> None:
        self.corpus_root = Path(corpus_root)

    def _check_root(self) -> None:
        if not self.corpus_root.is_dir():
            raise CorpusError(f"Template corpus not found: {self.corpus_root}")

    def list_templates(self) -> TemplateListing:
        """Return a listing of all valid templates, category then name."""
        self._check_root()
        return TemplateListing(self.corpus_root)

    def validate(self) -> list[ValidationWarning]:
        """Scan the whole corpus and return every validation problem."""
        listing = self.list_templates()
        for _ in listing:
            pass
        return listing.warnings

    def resolve(self, identifier: str) -> Template:
        """Look up a template by `category/name` or bare `name`.

        Invalid template directories never count towards ambiguity; a bare
        name matching one valid and one invalid template resolves to the
        valid one.

        Raises:
            TemplateNotFoundError: nothing matches, or every match is invalid.
            AmbiguousIdentifierError: a bare name matches several valid
                templates.
        """
        self._check_root()
        wanted = identifier.strip().strip("/")
        entries = discover_template_dirs(self.corpus_root)

        if "/" in wanted:
            category, _, name = wanted.partition("/")
            matches = [e for e in entries if e[0] == category and e[1] == name]
        else:
            matches = [e for e in entries if e[1] == wanted]

        if not matches:
            raise TemplateNotFoundError(identifier)

        valid = []
        invalid = []
        for category, name, template_dir in matches:
            subtrees = load_subtrees(template_dir)
            reason = validate_template_dir(template_dir, subtrees)
            if reason is None:
                valid.append((category, template_dir, subtrees))
            else:
                invalid.append((_qualify(category, name), reason))

        if len(valid) > 1:
            raise AmbiguousIdentifierError(
                identifier, [_qualify(c, d.name) for c, d, _ in valid]
            )
        if not valid:
            if len(invalid) == 1:
                reason = invalid[0][1]
            else:
                reason = "; ".join(f"{q}: {r}" for q, r in invalid)
            raise TemplateNotFoundError(identifier, f"invalid template: {reason}")

        category, template_dir, subtrees = valid[0]
        logger.debug("Resolved %s to %s", identifier, template_dir)
        return _build_template(template_dir, category, subtrees)

    def providers_of(self, template: Template) -> frozenset[str]:
        """Return the providers physically present for a template."""
        return template.providers
