"""Tests for the allow-list and category-table classification policies."""

from pathlib import Path, PurePath

import pytest
from PIL import Image

from typesort.classification import (
    DEFAULT_CATEGORY_TABLE,
    CategorySpec,
    CategoryTable,
    Classifier,
    build_allow_list,
)
from typesort.config.models import DEFAULT_ALLOWED_EXTENSIONS
from typesort.ingestion.detectors import TypeSniffer


def _write(path: Path, payload: bytes = b"content") -> Path:
    path.write_bytes(payload)
    return path


def test_allow_list_skips_unknown_extensions(tmp_path: Path) -> None:
    classifier = Classifier(allow_list=build_allow_list(DEFAULT_ALLOWED_EXTENSIONS))

    result = classifier.classify(_write(tmp_path / "movie.mp4"))

    assert classifier.mode == "allow_list"
    assert result.skip is True
    assert result.extension == "mp4"


def test_allow_list_flags_disallowed_archives(tmp_path: Path) -> None:
    classifier = Classifier(allow_list=build_allow_list(["pdf"]))

    result = classifier.classify(_write(tmp_path / "bundle.zip", b"PK\x03\x04" + b"\x00" * 12))

    assert result.skip is True
    assert result.is_archive is True


def test_allow_list_uses_extension_folders_and_overrides(tmp_path: Path) -> None:
    policy = build_allow_list(["pdf", "PNG", ".zip"], {"pdf": "PDF Files"})
    classifier = Classifier(allow_list=policy)

    pdf = classifier.classify(_write(tmp_path / "manual.pdf", b"%PDF-1.4"))
    image_path = tmp_path / "logo.png"
    Image.new("RGBA", (4, 4)).save(image_path)
    png = classifier.classify(image_path)
    bundle = classifier.classify(_write(tmp_path / "bundle.zip", b"PK\x05\x06" + b"\x00" * 18))

    assert pdf.relative_dir == PurePath("PDF Files")
    assert png.relative_dir == PurePath("png")
    assert bundle.category == "zip"
    assert bundle.is_archive is True
    assert classifier.recognized_extensions == frozenset({"pdf", "png", "zip"})


def test_allow_list_corrects_disguised_images(tmp_path: Path) -> None:
    disguised = tmp_path / "holiday.txt"
    Image.new("RGB", (8, 8), color="green").save(disguised, format="JPEG")
    classifier = Classifier(allow_list=build_allow_list(["jpg", "txt"]))

    result = classifier.classify(disguised)

    assert result.category == "jpg"
    assert result.file_name == "holiday.jpg"
    assert result.corrected_from == "txt"


@pytest.mark.parametrize(
    ("name", "category"),
    [
        ("budget.xlsx", "Spreadsheets"),
        ("deck.pptx", "Presentations"),
        ("song.flac", "Audio"),
        ("main.py", "Code"),
        ("poster.psd", "Design"),
        ("novel.epub", "Ebooks"),
        ("bundle.tar", "Archives"),
    ],
)
def test_category_table_maps_extensions(tmp_path: Path, name: str, category: str) -> None:
    classifier = Classifier()

    result = classifier.classify(_write(tmp_path / name))

    assert classifier.mode == "category_table"
    assert result.category == category
    assert result.subcategory is None
    assert result.is_special is False


def test_special_patterns_take_priority(tmp_path: Path) -> None:
    classifier = Classifier()

    screenshot = classifier.classify(_write(tmp_path / "Screenshot 2024-01-01.png"))
    server_log = classifier.classify(_write(tmp_path / "server.log"))
    backup = classifier.classify(_write(tmp_path / "photos-backup.zip"))

    assert screenshot.relative_dir == PurePath("Images", "Screenshots")
    assert screenshot.is_special is True
    assert server_log.relative_dir == PurePath("Documents", "Logs")
    assert backup.category == "Backups"
    assert backup.subcategory is None


def test_special_patterns_see_corrected_names(tmp_path: Path) -> None:
    disguised = tmp_path / "receipt.txt"
    Image.new("RGB", (8, 8)).save(disguised, format="JPEG")

    result = Classifier().classify(disguised)

    assert result.file_name == "receipt.jpg"
    assert result.category == "Images"
    assert result.is_special is False


def test_unknown_extensions_land_under_other(tmp_path: Path) -> None:
    classifier = Classifier()

    unknown = classifier.classify(_write(tmp_path / "model.blend"))
    bare = classifier.classify(_write(tmp_path / "Makefile", b"all:\n"))

    assert unknown.relative_dir == PurePath("Other", "blend")
    assert unknown.skip is False
    assert bare.relative_dir == PurePath("Other", "no-extension")


def test_custom_tables_do_not_leak_between_classifiers(tmp_path: Path) -> None:
    vectors = CategorySpec(name="Vectors", extensions=frozenset({"svg"}))
    custom = CategoryTable(categories=(vectors,))
    vector = _write(tmp_path / "icon.svg", b"<svg/>")

    assert Classifier(table=custom).classify(vector).category == "Vectors"
    assert Classifier().classify(vector).category == "Images"
    assert "svg" in DEFAULT_CATEGORY_TABLE.extensions


def test_sniffing_can_be_disabled(tmp_path: Path) -> None:
    disguised = tmp_path / "photo.md"
    Image.new("RGB", (8, 8)).save(disguised, format="JPEG")

    result = Classifier(TypeSniffer(enabled=False)).classify(disguised)

    assert result.category == "Documents"
    assert result.corrected_from is None
