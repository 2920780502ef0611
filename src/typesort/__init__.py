"""typesort copies files into folders named after their detected type.

The command line lives in :mod:`typesort.cli`; library callers usually want
:class:`typesort.ingestion.pipeline.OrganizationPipeline`.
"""

from importlib import metadata as _metadata

__all__ = ["__version__"]


def __getattr__(name: str):
    # Resolved on access so importing typesort never touches package metadata.
    if name != "__version__":
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return _metadata.version("typesort")


def __dir__():
    return sorted({*globals(), "__version__"})
