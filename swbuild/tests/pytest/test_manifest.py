"""
Tests for generated sources: LESS manifest, JS file list, variable map.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from swbuild.build.config import BUILTIN_VARIABLES, RESPONSIVE_THEME_LESS
from swbuild.build.manifest import (
    build_js_file_list,
    build_less_manifest,
    merge_variables,
    write_less_manifest,
)


# =============================================================================
# LESS Manifest
# =============================================================================


@pytest.mark.evergreen
class TestLessManifest:
    """One import line per partial, in order, with the theme optionally blanked."""

    def test_simple_manifest(self) -> None:
        """Two partials become two import lines."""
        content = build_less_manifest(["a.less", "b.less"])
        assert content == '@import "../a.less";\n@import "../b.less";\n'

    def test_empty_list(self) -> None:
        assert build_less_manifest([]) == ""

    @pytest.mark.parametrize("exclude", [False, True])
    def test_line_count_matches_entries(self, exclude: bool) -> None:
        """Line count equals entry count whether or not the theme is excluded."""
        entries = ["a.less", RESPONSIVE_THEME_LESS, "", "b.less"]
        content = build_less_manifest(entries, exclude)
        assert content.count("\n") == len(entries)
        assert content.endswith("\n")

    def test_exclusion_blanks_responsive_theme(self) -> None:
        """The responsive theme line is empty, the others are untouched."""
        entries = ["a.less", RESPONSIVE_THEME_LESS, "b.less"]
        content = build_less_manifest(entries, exclude_responsive_theme=True)

        assert content.split("\n") == [
            '@import "../a.less";',
            "",
            '@import "../b.less";',
            "",
        ]
        assert RESPONSIVE_THEME_LESS not in content

    def test_no_exclusion_keeps_responsive_theme(self) -> None:
        entries = [RESPONSIVE_THEME_LESS, "a.less"]
        content = build_less_manifest(entries, exclude_responsive_theme=False)
        assert content.splitlines() == [
            f'@import "../{RESPONSIVE_THEME_LESS}";',
            '@import "../a.less";',
        ]

    def test_exclusion_is_exact_match_only(self) -> None:
        """Other themes' all.less files are not excluded."""
        other = "themes/Frontend/Bare/frontend/_public/src/less/all.less"
        content = build_less_manifest([other], exclude_responsive_theme=True)
        assert content == f'@import "../{other}";\n'

    def test_empty_entry_is_blank_line(self) -> None:
        content = build_less_manifest(["a.less", "", "b.less"])
        assert content == '@import "../a.less";\n\n@import "../b.less";\n'

    def test_order_preserved(self) -> None:
        entries = [f"p{i}.less" for i in range(10, 0, -1)]
        lines = build_less_manifest(entries).splitlines()
        assert lines == [f'@import "../{e}";' for e in entries]


@pytest.mark.evergreen
class TestWriteManifest:
    """Manifest writes overwrite unconditionally."""

    def test_overwrites_existing(self, tmp_path: Path) -> None:
        target = tmp_path / "shop.less"
        target.write_text("stale content\n" * 5)

        write_less_manifest('@import "../a.less";\n', target)

        assert target.read_text() == '@import "../a.less";\n'

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "web" / "cache" / "shop.less"
        write_less_manifest("\n", target)
        assert target.read_text() == "\n"


# =============================================================================
# JS File List
# =============================================================================


@pytest.mark.evergreen
class TestJsFileList:
    """Each JS entry gets the shop root prefix; order is kept."""

    def test_prefix_and_order(self) -> None:
        assert build_js_file_list(["x.js", "a/b.js", "c.js"]) == ["../x.js", "../a/b.js", "../c.js"]

    def test_empty(self) -> None:
        assert build_js_file_list([]) == []

    def test_length_preserved_with_duplicates(self) -> None:
        assert build_js_file_list(["x.js", "x.js"]) == ["../x.js", "../x.js"]


# =============================================================================
# Variable Merge
# =============================================================================


@pytest.mark.evergreen
class TestMergeVariables:
    """Built-ins first, shop overrides second; last write wins."""

    def test_builtins_present_without_overrides(self) -> None:
        merged = merge_variables(BUILTIN_VARIABLES, {"foo": "bar"})
        assert merged == {**BUILTIN_VARIABLES, "foo": "bar"}
        assert set(merged) == {"font-directory", "OpenSansPath", "foo"}

    def test_override_wins(self) -> None:
        merged = merge_variables(BUILTIN_VARIABLES, {"OpenSansPath": '"local"'})
        assert merged["OpenSansPath"] == '"local"'
        assert merged["font-directory"] == BUILTIN_VARIABLES["font-directory"]

    def test_inputs_not_mutated(self) -> None:
        builtins = {"a": "1"}
        overrides = {"a": "2", "b": 3}
        merge_variables(builtins, overrides)
        assert builtins == {"a": "1"}
        assert overrides == {"a": "2", "b": 3}

    def test_primitive_values_kept(self) -> None:
        merged = merge_variables({}, {"n": 4, "flag": True})
        assert merged == {"n": 4, "flag": True}
