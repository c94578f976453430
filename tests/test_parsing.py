from __future__ import annotations

import pytest

from crabshell.errors import CommandSyntaxError
from crabshell.parsing import (
    CommandKind,
    Pipe,
    Plain,
    Redirection,
    Token,
    iter_tokens,
    last_token,
    parse_line,
    render_command,
    validate_command,
)


def _args(node: object) -> list[str]:
    assert isinstance(node, Plain)
    return node.args


def test_plain_line_strips_quotes_and_keeps_offsets() -> None:
    parsed = parse_line('cd "My Documents"')

    assert parsed.kind is CommandKind.PLAIN
    assert _args(parsed.command) == ["cd", "My Documents"]
    assert parsed.tokens[1] == Token(text="My Documents", start=3, has_quotes=True)
    assert parsed.ends_with_blank is False


def test_quotes_are_kept_when_not_stripping() -> None:
    parsed = parse_line('cd "My Documents"', strip_quotes=False)

    assert _args(parsed.command) == ["cd", '"My Documents"']


def test_pipe_splits_before_and_after() -> None:
    parsed = parse_line("ls -la | grep foo")

    assert parsed.kind is CommandKind.PIPE
    assert isinstance(parsed.command, Pipe)
    assert _args(parsed.command.before) == ["ls", "-la"]
    assert _args(parsed.command.after) == ["grep", "foo"]


def test_redirection_splits_before_and_after() -> None:
    parsed = parse_line("echo hi > out.txt")

    assert parsed.kind is CommandKind.REDIRECTION
    assert isinstance(parsed.command, Redirection)
    assert _args(parsed.command.before) == ["echo", "hi"]
    assert _args(parsed.command.after) == ["out.txt"]


def test_redirection_is_tested_before_pipes() -> None:
    parsed = parse_line("cat a.txt | sort > sorted.txt")

    assert isinstance(parsed.command, Redirection)
    before = parsed.command.before
    assert isinstance(before, Pipe)
    assert _args(before.before) == ["cat", "a.txt"]
    assert _args(before.after) == ["sort"]
    assert _args(parsed.command.after) == ["sorted.txt"]


def test_chained_pipes_nest_to_the_right() -> None:
    parsed = parse_line("a | b | c")

    assert isinstance(parsed.command, Pipe)
    assert _args(parsed.command.before) == ["a"]
    after = parsed.command.after
    assert isinstance(after, Pipe)
    assert _args(after.before) == ["b"]
    assert _args(after.after) == ["c"]


def test_quoted_operator_is_an_ordinary_argument() -> None:
    parsed = parse_line('echo ">" "|"')

    assert parsed.kind is CommandKind.PLAIN
    assert _args(parsed.command) == ["echo", ">", "|"]


def test_operator_glued_to_a_word_is_not_an_operator() -> None:
    parsed = parse_line("ls>out")

    assert parsed.kind is CommandKind.PLAIN
    assert _args(parsed.command) == ["ls>out"]


@pytest.mark.parametrize("line", ["", "   ", "\t \t"])
def test_blank_line_is_an_empty_plain_command(line: str) -> None:
    parsed = parse_line(line)

    assert parsed.command == Plain()
    assert parsed.tokens == ()
    assert parsed.ends_with_blank is True


@pytest.mark.parametrize("line", ["ls ", "ls\t"])
def test_trailing_whitespace_sets_ends_with_blank(line: str) -> None:
    parsed = parse_line(line)

    assert parsed.ends_with_blank is True
    assert _args(parsed.command) == ["ls"]


def test_runs_of_spaces_do_not_create_empty_tokens() -> None:
    assert _args(parse_line("ls   -la\t\tfoo").command) == ["ls", "-la", "foo"]


def test_spaces_inside_quotes_are_preserved() -> None:
    assert _args(parse_line('echo "a  b"').command) == ["echo", "a  b"]


def test_unterminated_quote_keeps_rest_of_line_in_one_token() -> None:
    parsed = parse_line('cd "My Docu')

    assert _args(parsed.command) == ["cd", "My Docu"]
    assert parsed.tokens[-1].start == 3


def test_token_count_matches_whitespace_split_for_unquoted_lines() -> None:
    line = "git  commit -m message\tnow"

    assert len(parse_line(line).tokens) == len(line.split())


def test_iter_tokens_skips_operators() -> None:
    parsed = parse_line("a b | c > d")

    assert [token.text for token in iter_tokens(parsed.command)] == ["a", "b", "c", "d"]


def test_last_token_is_empty_at_end_after_blank() -> None:
    assert last_token(parse_line("ls ")) == Token(text="", start=3)
    assert last_token(parse_line("")) == Token(text="", start=0)


def test_last_token_is_final_word() -> None:
    assert last_token(parse_line("cat fo")) == Token(text="fo", start=4)


@pytest.mark.parametrize(
    "line",
    [
        'grep "two words" file.txt | wc -l',
        "sort data.csv > sorted.csv",
        "cat a | sort | uniq > out",
    ],
)
def test_render_rebuilds_single_spaced_lines(line: str) -> None:
    assert render_command(parse_line(line).command) == line


def test_render_collapses_extra_whitespace() -> None:
    assert render_command(parse_line("ls   -la  |  wc").command) == "ls -la | wc"


@pytest.mark.parametrize("line", ["| grep x", "ls |", "> out", "echo hi >", "a > b > c", "a > b | c"])
def test_validate_rejects_malformed_operator_lines(line: str) -> None:
    with pytest.raises(CommandSyntaxError):
        validate_command(parse_line(line).command)


@pytest.mark.parametrize("line", ["ls", "ls | wc", "ls | sort > out", "a | b | c"])
def test_validate_accepts_well_formed_lines(line: str) -> None:
    validate_command(parse_line(line).command)


def test_open_quote_keeps_trailing_blanks_in_last_token() -> None:
    parsed = parse_line('cd "My ')

    assert parsed.open_quote is True
    assert parsed.ends_with_blank is True
    assert last_token(parsed) == Token(text="My ", start=3, has_quotes=True)


def test_closed_quotes_do_not_report_open_quote() -> None:
    parsed = parse_line('cd "My Docs" ')

    assert parsed.open_quote is False
    assert last_token(parsed) == Token(text="", start=13)
