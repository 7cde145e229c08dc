import json
from pathlib import Path

import pytest

from bookwright.book import (
    Book,
    BookError,
    Chapter,
    create_missing_chapters,
    load_book,
    load_book_from_disk,
    load_chapter,
    load_summary_item,
)
from bookwright.sections import SectionNumber
from bookwright.summary import Link, PartTitle, Separator, Summary

DUMMY_SRC = (
    "\n# Dummy Chapter\n\nthis is some dummy text.\n\nAnd here is some more text.\n"
)


def _write(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(text)


def dummy_link(tmp_path: Path) -> Link:
    chapter_path = tmp_path / "chapter_1.md"
    _write(chapter_path, DUMMY_SRC)
    return Link("Chapter 1", chapter_path)


def nested_links(tmp_path: Path) -> Link:
    root = dummy_link(tmp_path)
    second_path = tmp_path / "second.md"
    _write(second_path, "Hello World!")
    root.nested_items.append(
        Link("Nested Chapter 1", second_path, SectionNumber([1, 2]))
    )
    root.nested_items.append(Separator())
    root.nested_items.append(
        Link("Nested Chapter 1", second_path, SectionNumber([1, 2]))
    )
    return root


def nested_book() -> Book:
    return Book(
        [
            Chapter(
                name="Chapter 1",
                content=DUMMY_SRC,
                path=Path("Chapter_1/index.md"),
                source_path=Path("Chapter_1/index.md"),
                sub_items=[
                    Chapter(
                        name="Hello World",
                        path="Chapter_1/hello.md",
                        source_path="Chapter_1/hello.md",
                    ),
                    Separator(),
                    Chapter(
                        name="Goodbye World",
                        path="Chapter_1/goodbye.md",
                        source_path="Chapter_1/goodbye.md",
                    ),
                ],
            ),
            Separator(),
        ]
    )


def test_load_a_single_chapter_from_disk(tmp_path):
    link = dummy_link(tmp_path)
    expected = Chapter(
        name="Chapter 1",
        content=DUMMY_SRC,
        path=Path("chapter_1.md"),
        source_path=Path("chapter_1.md"),
    )
    assert load_chapter(link, tmp_path, []) == expected


def test_load_a_single_chapter_with_utf8_bom_from_disk(tmp_path):
    chapter_path = tmp_path / "chapter_1.md"
    _write(chapter_path, "\ufeff" + DUMMY_SRC)
    link = Link("Chapter 1", chapter_path)
    got = load_chapter(link, tmp_path, [])
    assert got.content == DUMMY_SRC
    assert got.path == Path("chapter_1.md")


def test_cant_load_a_nonexistent_chapter():
    link = Link("Chapter 1", "/foo/bar/baz.md")
    with pytest.raises(BookError):
        load_chapter(link, "", [])


def test_load_recursive_link_with_separators(tmp_path):
    root = nested_links(tmp_path)
    nested = Chapter(
        name="Nested Chapter 1",
        content="Hello World!",
        number=SectionNumber([1, 2]),
        path=Path("second.md"),
        source_path=Path("second.md"),
        parent_names=["Chapter 1"],
    )
    expected = Chapter(
        name="Chapter 1",
        content=DUMMY_SRC,
        path=Path("chapter_1.md"),
        source_path=Path("chapter_1.md"),
        sub_items=[nested, Separator(), nested],
    )
    assert load_summary_item(root, tmp_path, []) == expected


def test_load_a_book_with_a_single_chapter(tmp_path):
    summary = Summary(numbered_chapters=[dummy_link(tmp_path)])
    expected = Book(
        [
            Chapter(
                name="Chapter 1",
                content=DUMMY_SRC,
                path=Path("chapter_1.md"),
                source_path=Path("chapter_1.md"),
            )
        ]
    )
    assert load_book_from_disk(summary, tmp_path) == expected


def test_book_iter_iterates_over_sequential_items():
    book = Book([Chapter(name="Chapter 1", content=DUMMY_SRC), Separator()])
    assert list(book) == book.sections


def test_iterate_over_nested_book_items():
    items = list(nested_book())
    assert len(items) == 5
    names = [item.name for item in items if isinstance(item, Chapter)]
    assert names == ["Chapter 1", "Hello World", "Goodbye World"]


def test_for_each_visits_all_items():
    book = nested_book()
    visited = []
    book.for_each(visited.append)
    assert len(visited) == len(list(book))


def test_for_each_visits_children_before_parent():
    book = nested_book()
    names = []
    book.for_each(lambda item: names.append(getattr(item, "name", None)))
    assert names == ["Hello World", None, "Goodbye World", "Chapter 1", None]


def test_for_each_can_mutate_chapters():
    book = nested_book()

    def shout(item):
        if isinstance(item, Chapter):
            item.name = item.name.upper()

    book.for_each(shout)
    names = [item.name for item in book if isinstance(item, Chapter)]
    assert names == ["CHAPTER 1", "HELLO WORLD", "GOODBYE WORLD"]


def test_cant_load_chapters_with_an_empty_path(tmp_path):
    dummy_link(tmp_path)
    summary = Summary(numbered_chapters=[Link("Empty", Path(""))])
    with pytest.raises(BookError):
        load_book_from_disk(summary, tmp_path)


def test_cant_load_chapters_when_the_link_is_a_directory(tmp_path):
    dummy_link(tmp_path)
    nested = tmp_path / "nested"
    nested.mkdir()
    summary = Summary(numbered_chapters=[Link("nested", nested)])
    with pytest.raises(BookError):
        load_book_from_disk(summary, tmp_path)


def test_draft_link_becomes_draft_chapter(tmp_path):
    link = Link("Draft", None, SectionNumber([3]))
    got = load_chapter(link, tmp_path, ["Parent"])
    assert got.is_draft()
    assert got.content == ""
    assert got.parent_names == ["Parent"]
    assert got.number == SectionNumber([3])


def test_chapter_draft_constructor():
    chapter = Chapter.draft("Later", ["A", "B"])
    assert chapter.is_draft()
    assert chapter.path is None and chapter.source_path is None
    assert chapter.parent_names == ["A", "B"]


def test_chapter_str_with_and_without_number():
    assert str(Chapter(name="Intro")) == "Intro"
    assert str(Chapter(name="Deep", number=SectionNumber([1, 2]))) == "1.2. Deep"


def test_push_item_appends_and_chains():
    book = Book()
    result = book.push_item(Chapter(name="One")).push_item(PartTitle("Part"))
    assert result is book
    assert book.sections == [Chapter(name="One"), PartTitle("Part")]


def test_part_titles_are_loaded(tmp_path):
    assert load_summary_item(PartTitle("Part I"), tmp_path, []) == PartTitle("Part I")


BOOK_JSON = {
    "sections": [
        {
            "Chapter": {
                "name": "Chapter 1",
                "content": "# Chapter 1\n",
                "number": [1],
                "sub_items": [],
                "path": "chapter_1.md",
                "source_path": "chapter_1.md",
                "parent_names": [],
            }
        },
        "Separator",
        {"PartTitle": "Appendix"},
    ],
    "__non_exhaustive": None,
}


def test_from_json_reads_items():
    book = Book.from_json(BOOK_JSON)
    chapter = book.sections[0]
    assert chapter.name == "Chapter 1"
    assert chapter.number == SectionNumber([1])
    assert chapter.path == Path("chapter_1.md")
    assert book.sections[1:] == [Separator(), PartTitle("Appendix")]


def test_json_round_trip():
    book = Book.from_json(json.dumps(BOOK_JSON))
    assert book.to_json() == BOOK_JSON
    assert Book.from_json(book.to_json()) == book


def test_from_json_rejects_bad_items():
    with pytest.raises(BookError):
        Book.from_json({"sections": ["Nonsense"]})
    with pytest.raises(BookError):
        Book.from_json({"sections": [{"Chapter": {"name": "x"}}]})
    with pytest.raises(BookError):
        Book.from_json("not json")


def test_load_book_creates_missing_chapters(tmp_path):
    _write(
        tmp_path / "SUMMARY.md",
        "# Summary\n\n- [Intro](./intro.md)\n  - [Deep](sub/deep.md)\n",
    )
    book = load_book(tmp_path, True)
    assert (tmp_path / "intro.md").read_text(encoding="utf-8") == "# Intro\n"
    assert (tmp_path / "sub" / "deep.md").read_text(encoding="utf-8") == "# Deep\n"
    chapters = [item for item in book if isinstance(item, Chapter)]
    assert [c.name for c in chapters] == ["Intro", "Deep"]
    assert chapters[1].path == Path("sub/deep.md")
    assert chapters[1].parent_names == ["Intro"]
    assert chapters[1].number == SectionNumber([1, 1])


def test_load_book_without_creating_missing_fails(tmp_path):
    _write(tmp_path / "SUMMARY.md", "- [Intro](./intro.md)\n")
    with pytest.raises(BookError):
        load_book(tmp_path, False)
    assert not (tmp_path / "intro.md").exists()


def test_load_book_without_summary_fails(tmp_path):
    with pytest.raises(BookError, match="SUMMARY.md"):
        load_book(tmp_path, True)


def test_create_missing_keeps_existing_files(tmp_path):
    _write(tmp_path / "intro.md", "existing")
    summary = Summary(prefix_chapters=[Link("Intro", "intro.md")])
    create_missing_chapters(tmp_path, summary)
    assert (tmp_path / "intro.md").read_text(encoding="utf-8") == "existing"