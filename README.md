# bookwright

bookwright reads a book that is written as a set of Markdown chapters. A
`SUMMARY.md` file lists the chapters. The package turns that summary into a
tree of chapters and loads the chapter files from disk. It also works out which
preprocessors and renderers should run over the book, and in what order.

## Installation

```
pip install .
```

To install what the test suite needs as well:

```
pip install ".[test]"
```

## The SUMMARY.md format

```markdown
# Summary

[Introduction](./intro.md)

- [Getting started](./start.md)
    - [Installing](./start/install.md)
- [Usage](./usage.md)

---

# Reference

- [Configuration](./config.md)
- [Draft chapter]()

[Appendix](./appendix.md)
```

- A level-1 heading at the very top is the summary's title. HTML comments
  before it are skipped.
- Plain links before the first list are *prefix* chapters. They have no numbers.
- List items are *numbered* chapters. They may be nested, and each one gets a
  section number such as `1.`, `1.1.` or `2.`. The numbering carries on across
  separators (`---`), comments, lower-level headings and parts.
- A further level-1 heading starts a new *part*. The heading is kept as a
  `PartTitle`.
- Plain links after the numbered chapters are *suffix* chapters. A list may not
  follow suffix chapters.
- A link with an empty target, such as `[Draft chapter]()`, is a draft chapter
  that has no file behind it. `%20` in a link target is read as a space.

## Parsing a summary

```python
from bookwright.summary_parser import parse_summary, SummaryParseError

with open("src/SUMMARY.md", encoding="utf-8") as handle:
    summary = parse_summary(handle.read())

print(summary.title)
for item in summary.all_items():
    print(item)
```

`parse_summary` returns a `Summary` (in `bookwright.summary`) with `title`,
`prefix_chapters`, `numbered_chapters` and `suffix_chapters`. Its items are
`Link`, `Separator` and `PartTitle` objects. `Summary.all_items` and
`Link.all_items` walk the nested items depth first.

An invalid summary raises `SummaryParseError`, which is a `ValueError`. Its
message gives the line and column where parsing failed. For finer control,
`SummaryParser` exposes `parse_title`, `parse_affix`, `parse_parts` and
`parse_numbered` separately.

`SectionNumber` in `bookwright.sections` is an immutable tuple of non-negative
integers. It prints in dotted form, for example `1.2.`, and an empty number
prints as `0`. `SectionNumber.child(index)` returns the number of a
sub-section.

`bookwright.markdown_events` turns Markdown into a flat stream of `Event`
objects. `parse_events` produces the stream, and `stringify_events` reduces
events to their plain text.

## Loading a book

```python
from bookwright.book import load_book, Chapter, BookError

book = load_book("my-book/src", create_missing=True)
for item in book:  # depth-first over every chapter, separator and part title
    if isinstance(item, Chapter):
        print(item)  # "1.2. Chapter name", or just the name if it has no number
```

With `create_missing=True`, any chapter file named in the summary that does not
exist yet is created. The new file holds a heading with the chapter's name.
A UTF-8 byte order mark at the start of a chapter file is removed. A missing or
unreadable `SUMMARY.md` or chapter raises `BookError`, and so does a summary
that cannot be parsed.

You can also load a book from a summary you already have:
`load_book_from_disk(summary, src_dir)` does this. `load_chapter` and
`load_summary_item` load single entries. `create_missing_chapters` creates the
stub files on its own.

A `Chapter` has a `name`, `content`, `number`, `sub_items`, `path`,
`source_path` and `parent_names`. `Chapter.draft` builds a chapter without a
file, and `is_draft` reports whether a chapter has no path.

`Book.for_each` applies a function to every item. It visits the items inside a
chapter before the chapter itself. `Book.push_item` appends an item to the top
level. `Book.to_json` and `Book.from_json` convert the book to and from its
JSON form, and `from_json` takes text, bytes or an already decoded mapping.

## Preprocessor and renderer planning

`bookwright.preprocessors.determine_preprocessors` takes a configuration
mapping with the same layout as a `book.toml` file. It returns a list of
`StepSpec` objects in the order they should run:

- The built-in `links` and `index` steps run unless
  `build.use-default-preprocessors` is false.
- The `before` and `after` lists in each `[preprocessor.<name>]` table set the
  order. A name that is not configured is ignored, and a warning is logged.
  Ties are broken by code-point order of the names.
- A cycle raises `PipelineError`. So does a `before` or `after` value that is
  not a list of strings.

A built-in step has no command (`is_builtin` is true). A custom step takes its
command from its `command` key, or from `custom_preprocessor_command`, which
falls back to `mdbook-<name>`.

`preprocessor_should_run(name, supports_renderer, renderer_name, config)`
decides whether a step applies to a renderer:

- When default preprocessors are enabled, a default step follows its own
  `supports_renderer` answer.
- Otherwise an explicit `preprocessor.<name>.renderers` list decides.
- Without such a list, `supports_renderer` decides.

`bookwright.renderers.determine_renderers` reads the `[output.*]` tables and
returns `RendererSpec` objects ordered by name. `html` and `markdown` are
built in. Any other renderer gets its `command` key, or `mdbook-<name>`. With
no output table configured, the result is the `html` renderer alone.

`build_dir_for(root, config, renderer_count, backend_name)` returns where a
renderer writes its output. The path is `build.build-dir` under the root, or
`book` if that key is not set. When more than one renderer is configured, each
renderer gets its own subdirectory of that path.

## Word counts

`bookwright.wordcount.write_wordcounts(book, config, destination)` creates the
destination directory and writes `wordcounts.txt` there. The file has one
`name: count` line for each chapter, and each line is also printed. The counts
are returned as `(name, count)` pairs.

Chapters named in `ignores` are left out. When `deny_odds` is set, a chapter
with an odd word count raises `OddWordCountError`, after its line has been
written. `WordcountConfig.from_table` reads the `ignores` and `deny-odds` keys
from a table. A missing or malformed table gives the default settings.

## The no-op preprocessor command

`bookwright-nop` is a preprocessor that leaves the book unchanged. It shows the
protocol that external preprocessors follow.

```
bookwright-nop supports html
```

This exits with status 0 if the renderer is supported and 1 if it is not. Every
renderer except `not-supported` counts as supported.

```
bookwright-nop < input.json > output.json
```

Run with no subcommand, the command reads a JSON array `[context, book]` from
standard input. It writes the book back to standard output as JSON.

It prints a warning on standard error if the context's `mdbook_version` is not
compatible with version 0.4.21. Compatibility follows caret rules: the version
must be at least 0.4.21 and still a 0.4 release.

It exits with status 1 and prints a message in these cases:

- the input is invalid;
- the version cannot be parsed;
- the `preprocessor.nop-preprocessor` table contains a `blow-up` key.

The same pieces are available in Python:

- `parse_input` reads the input;
- `check_version` checks the version;
- `NopPreprocessor` does the work;
- `main` runs the command.

## What this package does not do

bookwright plans a build but does not carry one out:

- It does not render HTML or any other output format.
- It does not run external preprocessor or renderer commands. It only works
  out which commands would run.
- It does not read `book.toml` itself. Configuration is passed in as an
  already loaded mapping.
- It has no commands to create, build, clean, test, serve or watch a book. The
  only command is `bookwright-nop`.