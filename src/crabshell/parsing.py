"""Quote-aware tokenizer and pipe/redirection classifier."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar, Union

from crabshell.errors import CommandSyntaxError

QUOTE = '"'
WHITESPACE = " \t"
PIPE_MARKER = "|"
REDIRECTION_MARKER = ">"


class CommandKind(str, Enum):
    PLAIN = "plain"
    PIPE = "pipe"
    REDIRECTION = "redirection"


@dataclass(frozen=True)
class Token:
    """One quote-aware word of a command line."""

    text: str
    start: int  # offset of the token in the line, quote characters included
    has_quotes: bool = False

    def is_marker(self, marker: str) -> bool:
        return not self.has_quotes and self.text == marker


@dataclass(frozen=True)
class Plain:
    tokens: tuple[Token, ...] = ()
    kind: ClassVar[CommandKind] = CommandKind.PLAIN

    @property
    def args(self) -> list[str]:
        return [token.text for token in self.tokens]


@dataclass(frozen=True)
class Pipe:
    before: CommandNode
    after: CommandNode
    kind: ClassVar[CommandKind] = CommandKind.PIPE


@dataclass(frozen=True)
class Redirection:
    before: CommandNode
    after: CommandNode
    kind: ClassVar[CommandKind] = CommandKind.REDIRECTION


CommandNode = Union[Plain, Pipe, Redirection]


@dataclass(frozen=True)
class ParsedLine:
    """Parse result: the classified command and whether the line ends in blanks."""

    command: CommandNode
    ends_with_blank: bool
    tokens: tuple[Token, ...] = field(default=())
    length: int = 0
    open_quote: bool = False  # line ended inside an unclosed quote

    @property
    def kind(self) -> CommandKind:
        return self.command.kind


def parse_line(line: str, strip_quotes: bool = True) -> ParsedLine:
    """Split ``line`` into tokens and classify it.

    Never raises: unterminated quotes keep the rest of the line in one token,
    which is what completion of partial input needs.
    """
    stripped = line.rstrip(WHITESPACE)
    if not stripped:
        return ParsedLine(command=Plain(), ends_with_blank=True, length=len(line))

    ends_with_blank = len(stripped) < len(line)
    scanned, open_quote = _scan(line, strip_quotes)
    tokens = tuple(scanned)
    return ParsedLine(
        command=classify(tokens),
        ends_with_blank=ends_with_blank,
        tokens=tokens,
        length=len(line),
        open_quote=open_quote,
    )


def tokenize(line: str, strip_quotes: bool = True) -> list[Token]:
    return _scan(line, strip_quotes)[0]


def _scan(line: str, strip_quotes: bool) -> tuple[list[Token], bool]:
    tokens: list[Token] = []
    in_quotes = False
    previous_delimiter = " "
    pos = 0
    length = len(line)
    while pos < length:
        end = _next_whitespace(line, pos)
        piece = line[pos:end]
        delimiter = line[end] if end < length else " "

        quote_count = piece.count(QUOTE)
        closes_or_opens = quote_count % 2 == 1
        if strip_quotes and quote_count:
            piece = piece.replace(QUOTE, "")

        if in_quotes and tokens:
            previous = tokens[-1]
            tokens[-1] = replace(
                previous,
                text=previous.text + previous_delimiter + piece,
                has_quotes=previous.has_quotes or quote_count > 0,
            )
        elif piece or quote_count:
            tokens.append(Token(text=piece, start=pos, has_quotes=quote_count > 0))

        if closes_or_opens:
            in_quotes = not in_quotes
        previous_delimiter = delimiter
        pos = end + 1
    if in_quotes and tokens and line[-1] in WHITESPACE:
        # blanks typed after an opening quote belong to the open word
        tokens[-1] = replace(tokens[-1], text=tokens[-1].text + previous_delimiter)
    return tokens, in_quotes


def _next_whitespace(line: str, pos: int) -> int:
    for index in range(pos, len(line)):
        if line[index] in WHITESPACE:
            return index
    return len(line)


def classify(tokens: Sequence[Token]) -> CommandNode:
    """Classify tokens, testing redirection before pipes; both split right-associatively."""
    return _split_on(tokens, REDIRECTION_MARKER)


def _split_on(tokens: Sequence[Token], marker: str) -> CommandNode:
    for index, token in enumerate(tokens):
        if not token.is_marker(marker):
            continue
        before, after = tokens[:index], tokens[index + 1 :]
        if marker == REDIRECTION_MARKER:
            return Redirection(before=_split_on(before, PIPE_MARKER), after=_split_on(after, REDIRECTION_MARKER))
        return Pipe(before=Plain(tuple(before)), after=_split_on(after, PIPE_MARKER))
    if marker == REDIRECTION_MARKER:
        return _split_on(tokens, PIPE_MARKER)
    return Plain(tuple(tokens))


def iter_tokens(node: CommandNode) -> Iterator[Token]:
    """Yield the leaf tokens of ``node`` left to right, operators excluded."""
    if isinstance(node, Plain):
        yield from node.tokens
        return
    yield from iter_tokens(node.before)
    yield from iter_tokens(node.after)


def last_token(parsed: ParsedLine) -> Token:
    """Return the token a completion should replace.

    After trailing blanks this is an empty token positioned at the end of the
    line, so completion offers entries for a new word. Blanks inside an
    unclosed quote still belong to the last word.
    """
    if parsed.open_quote and parsed.tokens:
        return parsed.tokens[-1]
    if parsed.ends_with_blank or not parsed.tokens:
        return Token(text="", start=parsed.length)
    return parsed.tokens[-1]


def quote_token(token: Token) -> str:
    if token.has_quotes and QUOTE not in token.text:
        return f"{QUOTE}{token.text}{QUOTE}"
    return token.text


def render_command(node: CommandNode) -> str:
    """Rebuild a command line with single spaces, re-adding stripped quotes."""
    if isinstance(node, Plain):
        return " ".join(quote_token(token) for token in node.tokens)
    marker = PIPE_MARKER if isinstance(node, Pipe) else REDIRECTION_MARKER
    return f"{render_command(node.before)} {marker} {render_command(node.after)}"


def validate_command(node: CommandNode) -> None:
    """Reject operator lines that cannot be handed to the executor.

    Every operator needs a command on both sides, and a redirection target
    must be a plain word list with no further operators.
    """
    if isinstance(node, Plain):
        return
    name = node.kind.value
    if _is_empty(node.before) or _is_empty(node.after):
        raise CommandSyntaxError(f"missing command around {name} operator")
    if isinstance(node, Redirection) and not isinstance(node.after, Plain):
        raise CommandSyntaxError("redirection target must be a file name")
    validate_command(node.before)
    validate_command(node.after)


def _is_empty(node: CommandNode) -> bool:
    return isinstance(node, Plain) and not node.tokens
