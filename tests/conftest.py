# ABOUTME: Shared pytest fixtures for shelfwise tests.
# ABOUTME: Provides sample EPUB files (valid and corrupt) and an empty library directory.

from pathlib import Path

import pytest
from ebooklib import epub


def write_epub(
    path: Path,
    *,
    title: str,
    authors: tuple[str, ...] = (),
    isbn: str | None = None,
    subjects: tuple[str, ...] = (),
    series: tuple[str, str] | None = None,
    date: str | None = None,
    language: str = "en",
    publisher: str | None = None,
    description: str | None = None,
) -> Path:
    """Write a structurally valid EPUB with the given metadata."""
    book = epub.EpubBook()
    book.set_identifier(f"id-{path.stem}")
    book.set_title(title)
    book.set_language(language)
    for author in authors:
        book.add_author(author)
    if isbn:
        book.add_metadata("DC", "identifier", isbn)
    for subject in subjects:
        book.add_metadata("DC", "subject", subject)
    if publisher:
        book.add_metadata("DC", "publisher", publisher)
    if description:
        book.add_metadata("DC", "description", description)
    if date:
        book.add_metadata("DC", "date", date)
    if series:
        name, index = series
        book.add_metadata(None, "meta", "", {"name": "calibre:series", "content": name})
        book.add_metadata(None, "meta", "", {"name": "calibre:series_index", "content": index})

    # Add a minimal chapter so the EPUB is structurally valid
    chapter = epub.EpubHtml(title="Chapter 1", file_name="chap01.xhtml", lang="en")
    chapter.content = b"<html><body><h1>Chapter 1</h1><p>Content.</p></body></html>"
    book.add_item(chapter)

    book.toc = [epub.Link("chap01.xhtml", "Chapter 1", "chap01")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]

    epub.write_epub(str(path), book)
    return path


@pytest.fixture
def sample_epub(tmp_path: Path) -> Path:
    """Create a minimal valid EPUB file with known metadata."""
    path = tmp_path / "books" / "name_of_the_rose.epub"
    path.parent.mkdir()
    write_epub(
        path,
        title="The Name of the Rose",
        authors=("Umberto Eco",),
        isbn="978-0-15-600131-0",
        subjects=("Historical", "sf", "mystery"),
        date="1980-09-01",
        publisher="Harcourt",
        description="<p>A mystery set in a medieval monastery.</p>",
    )
    return path


@pytest.fixture
def series_epub(tmp_path: Path) -> Path:
    """EPUB carrying calibre series metadata."""
    return write_epub(
        tmp_path / "dune.epub",
        title="Dune",
        authors=("Frank Herbert",),
        series=("Dune Chronicles", "1.0"),
    )


@pytest.fixture
def corrupt_epub(tmp_path: Path) -> Path:
    """Create a corrupt file that is not a valid EPUB."""
    filepath = tmp_path / "corrupt.epub"
    filepath.write_text("this is not a valid epub file")
    return filepath


@pytest.fixture
def minimal_epub(tmp_path: Path) -> Path:
    """Create an EPUB with minimal metadata (only title)."""
    return write_epub(tmp_path / "minimal.epub", title="Untitled Book")


@pytest.fixture
def library_dir(tmp_path: Path) -> Path:
    """An empty library directory."""
    path = tmp_path / "library"
    path.mkdir()
    return path
