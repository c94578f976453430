from __future__ import annotations

import os
from pathlib import Path

import pytest

from crabshell.completion import CompletionCandidate, PathCompleter, best_path


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    (root / "alpha.txt").write_text("", encoding="utf-8")
    (root / "alps").mkdir()
    (root / "alps" / "inner.txt").write_text("", encoding="utf-8")
    (root / "beta").write_text("", encoding="utf-8")
    (root / "My Docs").mkdir()
    return root


def _completer(cwd: Path, home: Path | None = None, *, case_insensitive: bool = False) -> PathCompleter:
    home_dir = home or cwd
    return PathCompleter(cwd=lambda: str(cwd), home=lambda: str(home_dir), case_insensitive=case_insensitive)


def _texts(candidates: list[CompletionCandidate]) -> list[str]:
    return [candidate.display_text for candidate in candidates]


def test_prefix_matches_files_and_marks_folders(tree: Path) -> None:
    result = _completer(tree).resolve("cat al")

    assert result.ok is True
    assert result.search_dir == tree
    assert _texts(result.candidates) == ["alpha.txt", f"alps{os.sep}"]
    assert all(candidate.replace_from == 4 for candidate in result.candidates)


def test_trailing_blank_offers_every_entry_for_a_new_word(tree: Path) -> None:
    candidates = _completer(tree).completions("ls ")

    assert _texts(candidates) == sorted(["alpha.txt", f"alps{os.sep}", "beta", f"My Docs{os.sep}"])
    assert {candidate.replace_from for candidate in candidates} == {3}


def test_names_with_spaces_need_quoting(tree: Path) -> None:
    (candidate,) = _completer(tree).completions("cd My")

    assert candidate.needs_quoting is True
    assert candidate.quoted() == f'"My Docs{os.sep}"'


def test_quoted_partial_replaces_from_opening_quote(tree: Path) -> None:
    (candidate,) = _completer(tree).completions('cd "My D')

    assert candidate.display_text == f"My Docs{os.sep}"
    assert candidate.replace_from == 3


def test_subfolder_candidates_carry_the_folder(tree: Path) -> None:
    candidates = _completer(tree).completions(f"cat alps{os.sep}")

    assert _texts(candidates) == [f"alps{os.sep}inner.txt"]


def test_home_prefix_is_expanded(tmp_path: Path, tree: Path) -> None:
    home = tmp_path / "home"
    (home / "docs").mkdir(parents=True)

    candidates = _completer(tree, home).completions(f"ls ~{os.sep}do")

    assert _texts(candidates) == [f"..{os.sep}home{os.sep}docs{os.sep}"]


def test_far_folders_are_shown_absolute(tmp_path: Path) -> None:
    deep = tmp_path / "a" / "b" / "c" / "d"
    deep.mkdir(parents=True)
    target = tmp_path / "x"
    target.mkdir()
    (target / "notes.md").write_text("", encoding="utf-8")

    candidates = _completer(deep).completions(f"cat {target}{os.sep}no")

    assert _texts(candidates) == [f"{target}{os.sep}notes.md"]


def test_missing_folder_yields_no_candidates(tree: Path) -> None:
    result = _completer(tree).resolve(f"cat nowhere{os.sep}fi")

    assert result.ok is False
    assert result.candidates == []


def test_case_insensitive_matching(tree: Path) -> None:
    assert _texts(_completer(tree, case_insensitive=True).completions("cat ALP")) == [
        "alpha.txt",
        f"alps{os.sep}",
    ]
    assert _completer(tree, case_insensitive=False).completions("cat ALP") == []


@pytest.mark.parametrize(
    ("absolute", "relative", "expected"),
    [
        ("/home/me/projects", "..", ".."),
        ("/opt", "../../../opt", "/opt"),
        ("/a/b", "../../../../../x", "/a/b"),
        ("/srv", "../srv-long-name", "/srv"),
        ("/srv/data", "", "/srv/data"),
    ],
)
def test_best_path(absolute: str, relative: str, expected: str) -> None:
    assert best_path(absolute, relative) == expected


def test_blanks_inside_open_quote_stay_in_the_word(tree: Path) -> None:
    (tree / "other").mkdir()

    candidates = _completer(tree).completions('cd "My ')

    assert _texts(candidates) == [f"My Docs{os.sep}"]
    assert candidates[0].replace_from == 3
    assert candidates[0].quoted() == f'"My Docs{os.sep}"'
