"""Building blocks for command-line applications: flags, contexts, templates, docs and completion."""

__version__ = "0.1.0"

__all__ = [
    "sortutil",
    "errors",
    "flagset",
    "parsing",
    "flags",
    "numeric",
    "slices",
    "context",
    "templates",
    "docs",
    "fish",
]