"""Classification policies and tables."""

from .engine import Classifier
from .models import (
    AllowListPolicy,
    CategorySpec,
    CategoryTable,
    Classification,
    SpecialPattern,
)
from .tables import ARCHIVE_EXTENSIONS, DEFAULT_CATEGORY_TABLE, build_allow_list

__all__ = [
    "Classifier",
    "AllowListPolicy",
    "CategorySpec",
    "CategoryTable",
    "Classification",
    "SpecialPattern",
    "ARCHIVE_EXTENSIONS",
    "DEFAULT_CATEGORY_TABLE",
    "build_allow_list",
]
