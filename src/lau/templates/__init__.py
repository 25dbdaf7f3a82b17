"""Template corpus model and registry."""

from lau.templates.base import (
    ProviderSubtree,
    Template,
    TemplateFile,
    ValidationWarning,
)
from lau.templates.registry import (
    DESCRIPTION_FILENAME,
    TemplateListing,
    TemplateRegistry,
    discover_template_dirs,
    load_template_from_dir,
    read_description,
    validate_template_dir,
)

__all__ = [
    "DESCRIPTION_FILENAME",
    "ProviderSubtree",
    "Template",
    "TemplateFile",
    "TemplateListing",
    "TemplateRegistry",
    "ValidationWarning",
    "discover_template_dirs",
    "load_template_from_dir",
    "read_description",
    "validate_template_dir",
]
