"""Classification engine mapping sniffed file types to destination categories.

Two policies are supported and exactly one is active per run:

* the allow-list policy organizes a fixed set of extensions into one folder per
  extension and skips everything else;
* the category-table policy checks special filename patterns first, then the
  ordered extension table, and buckets anything unknown under ``Other/<ext>``.

Both policies classify by the *resolved* extension, i.e. after the
:class:`~typesort.ingestion.detectors.TypeSniffer` has had a chance to replace a
misleading extension with the one implied by the file's content.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AbstractSet, Optional

from typesort.ingestion.detectors import NO_EXTENSION, ResolvedType, TypeSniffer

from .models import AllowListPolicy, CategoryTable, Classification
from .tables import ARCHIVE_EXTENSIONS, DEFAULT_CATEGORY_TABLE

LOGGER = logging.getLogger(__name__)


class Classifier:
    """Decide the destination category of a file.

    Args:
        sniffer: Signature sniffer used to resolve each file's real extension.
        allow_list: Allow-list policy; when given, the category table is ignored.
        table: Category table used when no allow-list policy is given.
        archive_extensions: Extensions treated as expandable archives.
    """

    def __init__(
        self,
        sniffer: Optional[TypeSniffer] = None,
        *,
        allow_list: Optional[AllowListPolicy] = None,
        table: Optional[CategoryTable] = None,
        archive_extensions: AbstractSet[str] = ARCHIVE_EXTENSIONS,
    ) -> None:
        self.sniffer = sniffer or TypeSniffer()
        self.allow_list = allow_list
        self.table = table or DEFAULT_CATEGORY_TABLE
        self.archive_extensions = frozenset(archive_extensions)
        if allow_list is not None:
            self._recognized = allow_list.extensions
        else:
            self._recognized = self.table.extensions

    @property
    def mode(self) -> str:
        return "allow_list" if self.allow_list is not None else "category_table"

    @property
    def recognized_extensions(self) -> frozenset[str]:
        """Return the extensions eligible for signature-based correction."""
        return self._recognized

    def classify(self, path: Path) -> Classification:
        """Return the classification for the file at ``path``."""
        resolved = self.sniffer.resolve(path, self._recognized)
        if self.allow_list is not None:
            return self._classify_allow_list(path, resolved, self.allow_list)
        return self._classify_table(path, resolved)

    # ------------------------------------------------------------------ #
    # Policies                                                           #
    # ------------------------------------------------------------------ #

    def _classify_allow_list(
        self, path: Path, resolved: ResolvedType, policy: AllowListPolicy
    ) -> Classification:
        extension = resolved.extension
        file_name = resolved.file_name(path.name)
        if extension not in policy.extensions:
            return Classification(
                category=extension,
                skip=True,
                is_archive=extension in self.archive_extensions,
                extension=extension,
                file_name=file_name,
            )
        return Classification(
            category=policy.folder_for(extension),
            is_archive=extension in self.archive_extensions,
            extension=extension,
            file_name=file_name,
            corrected_from=resolved.nominal if resolved.corrected else None,
        )

    def _classify_table(self, path: Path, resolved: ResolvedType) -> Classification:
        extension = resolved.extension
        file_name = resolved.file_name(path.name)
        corrected_from = resolved.nominal if resolved.corrected else None
        is_archive = extension in self.archive_extensions

        for special in self.table.special_patterns:
            if special.matches(file_name):
                return Classification(
                    category=special.parent or special.name,
                    subcategory=special.name if special.parent else None,
                    is_archive=is_archive,
                    is_special=True,
                    extension=extension,
                    file_name=file_name,
                    corrected_from=corrected_from,
                )

        for spec in self.table.categories:
            if extension in spec.extensions:
                return Classification(
                    category=spec.name,
                    is_archive=is_archive,
                    extension=extension,
                    file_name=file_name,
                    corrected_from=corrected_from,
                )

        LOGGER.debug("No category for %s; filing under %s", path, self.table.other_category)
        return Classification(
            category=self.table.other_category,
            subcategory=extension or NO_EXTENSION,
            is_archive=is_archive,
            extension=extension,
            file_name=file_name,
            corrected_from=corrected_from,
        )


__all__ = ["Classifier"]
