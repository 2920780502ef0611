"""File type detection based on content signatures and file names."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import AbstractSet, Mapping, Optional, Tuple

LOGGER = logging.getLogger(__name__)

NO_EXTENSION = "no-extension"
PREFIX_SIZE = 16

# Ordered; the first matching prefix wins.
SIGNATURES: Tuple[Tuple[str, bytes], ...] = (
    ("jpg", b"\xff\xd8\xff"),
    ("png", b"\x89PNG"),
    ("pdf", b"%PDF"),
    ("zip", b"PK\x03\x04"),
    ("zip", b"PK\x05\x06"),
    ("zip", b"PK\x07\x08"),
    ("rar", b"Rar!"),
    ("eps", b"%!PS"),
    ("psd", b"8BPS"),
    ("gif", b"GIF8"),
    ("7z", b"7z\xbc\xaf\x27\x1c"),
    ("gz", b"\x1f\x8b"),
)

# Extensions that legitimately carry another kind's signature. A nominal extension
# listed under the sniffed kind is never rewritten.
SIGNATURE_FAMILIES: Mapping[str, frozenset[str]] = {
    "jpg": frozenset({"jpg", "jpeg", "jpe", "jfif"}),
    "eps": frozenset({"eps", "ps", "ai", "epsf"}),
    "pdf": frozenset({"pdf", "ai"}),
    "zip": frozenset(
        {
            "zip",
            "docx",
            "xlsx",
            "pptx",
            "odt",
            "ods",
            "odp",
            "epub",
            "jar",
            "apk",
            "cbz",
            "xpi",
            "whl",
            "ipa",
            "sketch",
            "numbers",
            "pages",
            "key",
        }
    ),
    "rar": frozenset({"rar", "cbr"}),
    "gz": frozenset({"gz", "tgz"}),
    "gif": frozenset({"gif"}),
    "png": frozenset({"png"}),
    "psd": frozenset({"psd", "psb"}),
    "7z": frozenset({"7z"}),
}


def extension_of(path: Path | str) -> str:
    """Return the lowercase extension of ``path`` without the dot, or the sentinel."""
    suffix = Path(path).suffix.lower()
    return suffix[1:] if len(suffix) > 1 else NO_EXTENSION


@dataclass(frozen=True, slots=True)
class ResolvedType:
    """Outcome of reconciling a file's sniffed kind with its nominal extension.

    Attributes:
        nominal: Extension taken from the file name.
        sniffed: Kind reported by the signature table (or the nominal fallback).
        extension: Extension the file is classified and named by.
        corrected: Whether ``extension`` replaces the nominal one.
    """

    nominal: str
    sniffed: str
    extension: str
    corrected: bool = False

    def file_name(self, original: str) -> str:
        """Return ``original`` with its extension rewritten when corrected."""
        if not self.corrected:
            return original
        if self.nominal == NO_EXTENSION:
            stem = original.rstrip(".") or original
        else:
            stem = Path(original).stem
        return f"{stem}.{self.extension}"


class TypeSniffer:
    """Identify a file's kind from its leading bytes, falling back to its name."""

    def __init__(self, *, enabled: bool = True, correct_extensions: bool = True) -> None:
        self.enabled = enabled
        self.correct_extensions = correct_extensions

    def sniff(self, path: Path) -> str:
        """Return the detected kind of ``path``.

        Unreadable files never raise; they report their extension instead.
        """
        if not self.enabled:
            return extension_of(path)
        try:
            with path.open("rb") as handle:
                prefix = handle.read(PREFIX_SIZE)
        except OSError as exc:
            LOGGER.debug("Could not sniff %s (%s); using its extension.", path, exc)
            return extension_of(path)

        kind = match_signature(prefix)
        return kind if kind is not None else extension_of(path)

    def resolve(self, path: Path, recognized: AbstractSet[str]) -> ResolvedType:
        """Reconcile the sniffed kind of ``path`` with its nominal extension.

        Args:
            path: File to inspect.
            recognized: Extensions the active classification policy knows about.

        Returns:
            ResolvedType: The extension to classify by and whether it was corrected.
        """
        nominal = extension_of(path)
        sniffed = self.sniff(path)
        if sniffed == nominal or nominal in SIGNATURE_FAMILIES.get(sniffed, ()):
            return ResolvedType(nominal=nominal, sniffed=sniffed, extension=nominal)
        if self.correct_extensions and sniffed in recognized:
            LOGGER.info("Corrected extension %s -> %s for %s", nominal, sniffed, path)
            return ResolvedType(nominal=nominal, sniffed=sniffed, extension=sniffed, corrected=True)
        return ResolvedType(nominal=nominal, sniffed=sniffed, extension=nominal)


def match_signature(prefix: bytes) -> Optional[str]:
    """Return the kind whose signature starts ``prefix``, if any."""
    for kind, signature in SIGNATURES:
        if prefix.startswith(signature):
            return kind
    return None


__all__ = [
    "NO_EXTENSION",
    "PREFIX_SIZE",
    "SIGNATURES",
    "SIGNATURE_FAMILIES",
    "ResolvedType",
    "TypeSniffer",
    "extension_of",
    "match_signature",
]
