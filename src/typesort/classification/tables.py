"""Default category and special-pattern tables."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from .models import AllowListPolicy, CategorySpec, CategoryTable, SpecialPattern, compile_patterns

ARCHIVE_EXTENSIONS: frozenset[str] = frozenset({"zip", "rar", "7z"})


def _spec(name: str, extensions: str, icon: str, description: str) -> CategorySpec:
    return CategorySpec(
        name=name,
        extensions=frozenset(extensions.split()),
        icon=icon,
        description=description,
    )


DEFAULT_CATEGORIES = (
    _spec(
        "Documents",
        "pdf doc docx txt rtf odt pages tex wpd md markdown",
        "📄",
        "Text documents, PDFs, and written content",
    ),
    _spec("Spreadsheets", "xls xlsx csv ods numbers", "📊", "Spreadsheets and data files"),
    _spec("Presentations", "ppt pptx odp key", "📽️", "Presentation files"),
    _spec(
        "Images",
        "jpg jpeg png gif bmp tiff tif svg webp ico raw cr2 nef arw",
        "🖼️",
        "Photos, graphics, and image files",
    ),
    _spec(
        "Videos",
        "mp4 avi mkv mov wmv flv webm m4v 3gp mpg mpeg",
        "🎬",
        "Video files and movies",
    ),
    _spec("Audio", "mp3 wav flac aac ogg wma m4a opus", "🎵", "Music and audio files"),
    _spec("Archives", "zip rar 7z tar gz bz2 xz cab iso", "📦", "Compressed and archive files"),
    _spec(
        "Code",
        "js html css py java cpp c h php rb go rs swift kt",
        "💻",
        "Programming and markup files",
    ),
    _spec("Design", "psd ai eps indd sketch fig xd cdr", "🎨", "Design and graphics files"),
    _spec("Fonts", "ttf otf woff woff2 eot", "🔤", "Font files"),
    _spec("Executables", "exe msi dmg pkg deb rpm appimage", "⚙️", "Executable and installer files"),
    _spec("Data", "json xml yaml yml sql db sqlite", "🗃️", "Data and database files"),
    _spec("Ebooks", "epub mobi azw azw3 fb2", "📚", "Electronic books"),
    _spec("CAD", "dwg dxf step stp iges igs", "📐", "CAD and engineering files"),
    _spec("Virtual", "vmdk vdi vhd vhdx ova ovf", "💿", "Virtual machine files"),
)

DEFAULT_SPECIAL_PATTERNS = (
    SpecialPattern(
        name="Screenshots",
        patterns=compile_patterns(r"screenshot", r"screen\s*shot", r"capture"),
        parent="Images",
        icon="📸",
        description="Screenshots and screen captures",
    ),
    SpecialPattern(
        name="Downloads",
        patterns=compile_patterns(r"download", r"temp", r"tmp"),
        icon="⬇️",
        description="Downloaded and temporary files",
    ),
    SpecialPattern(
        name="Backups",
        patterns=compile_patterns(r"backup", r"bak$", r"\.old$", r"\.backup$"),
        icon="💾",
        description="Backup files",
    ),
    SpecialPattern(
        name="Logs",
        patterns=compile_patterns(r"\.log$", r"\.txt$"),
        parent="Documents",
        icon="📋",
        description="Log files",
    ),
)

DEFAULT_CATEGORY_TABLE = CategoryTable(
    categories=DEFAULT_CATEGORIES,
    special_patterns=DEFAULT_SPECIAL_PATTERNS,
)


def build_allow_list(
    extensions: Iterable[str], folder_names: Mapping[str, str] | None = None
) -> AllowListPolicy:
    """Return an immutable allow-list policy."""
    return AllowListPolicy(
        extensions=frozenset(ext.lower().lstrip(".") for ext in extensions),
        folder_names=MappingProxyType(dict(folder_names or {})),
    )


__all__ = [
    "ARCHIVE_EXTENSIONS",
    "DEFAULT_CATEGORIES",
    "DEFAULT_SPECIAL_PATTERNS",
    "DEFAULT_CATEGORY_TABLE",
    "build_allow_list",
]
