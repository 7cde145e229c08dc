from pathlib import Path

from bookwright.renderers import (
    RendererSpec,
    build_dir_for,
    custom_renderer_command,
    determine_renderers,
)


def test_config_defaults_to_html_renderer_if_empty():
    got = determine_renderers({})
    assert len(got) == 1
    assert got[0].name == "html"
    assert got[0].is_builtin


def test_add_a_random_renderer_to_the_config():
    got = determine_renderers({"output": {"random": {}}})
    assert len(got) == 1
    assert got[0].name == "random"
    assert got[0].command == "mdbook-random"


def test_add_a_random_renderer_with_custom_command_to_the_config():
    got = determine_renderers({"output": {"random": {"command": "false"}}})
    assert len(got) == 1
    assert got[0].name == "random"
    assert got[0].command == "false"


def test_builtin_and_custom_renderers_are_ordered_by_name():
    config = {"output": {"markdown": {}, "html": {}, "epub": {}}}
    got = determine_renderers(config)
    assert got == [
        RendererSpec("epub", "mdbook-epub"),
        RendererSpec("html"),
        RendererSpec("markdown"),
    ]


def test_custom_renderer_command_ignores_non_string_command():
    assert custom_renderer_command("pdf", {"command": 3}) == "mdbook-pdf"
    assert custom_renderer_command("pdf", "not a table") == "mdbook-pdf"


def test_build_dir_single_renderer_uses_build_dir():
    got = build_dir_for("/root", {}, 1, "html")
    assert got == Path("/root/book")


def test_build_dir_multiple_renderers_get_subdirectories():
    config = {"build": {"build-dir": "outputs"}}
    got = build_dir_for("/root", config, 2, "epub")
    assert got == Path("/root/outputs/epub")


def test_build_dir_honours_configured_dir():
    config = {"build": {"build-dir": "out"}}
    assert build_dir_for("/r", config, 0, "html") == Path("/r/out")