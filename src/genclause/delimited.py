"""Item lists whose elements are separated by a punctuation token.

A ``Delimited`` keeps every separator it was built from, so ``<'a,>`` and
``<'a>`` stay distinguishable after parsing and print back the way they were
written.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Generic, Iterable, Iterator, List, Optional, TypeVar

from genclause.lexer import Token, TokenType

if TYPE_CHECKING:
    from genclause.parser import Parser

T = TypeVar("T")


@dataclass
class Pair(Generic[T]):
    item: T
    delimiter: Optional[Token] = None


@dataclass
class Delimited(Generic[T]):
    """Ordered (item, delimiter) pairs; only the last pair may lack its delimiter."""

    elements: List[Pair[T]] = field(default_factory=list)

    @classmethod
    def from_items(cls, items: Iterable[T], delimiter: TokenType, trailing: bool = False) -> "Delimited[T]":
        result = cls()
        for item in items:
            if result.elements:
                result.push_trailing(Token.default(delimiter))
            result.push(item)
        if trailing and result.elements:
            result.push_trailing(Token.default(delimiter))
        return result

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[T]:
        return (pair.item for pair in self.elements)

    def __getitem__(self, index: int) -> T:
        return self.elements[index].item

    def pairs(self) -> Iterator[Pair[T]]:
        return iter(self.elements)

    def is_empty(self) -> bool:
        return not self.elements

    def first(self) -> Optional[T]:
        return self.elements[0].item if self.elements else None

    def last(self) -> Optional[T]:
        return self.elements[-1].item if self.elements else None

    def trailing_delim(self) -> bool:
        return bool(self.elements) and self.elements[-1].delimiter is not None

    def empty_or_trailing(self) -> bool:
        return not self.elements or self.elements[-1].delimiter is not None

    def push(self, item: T) -> None:
        if self.elements and self.elements[-1].delimiter is None:
            raise ValueError("cannot push an item after an undelimited item")
        self.elements.append(Pair(item))

    def push_trailing(self, delimiter: Token) -> None:
        if not self.elements or self.elements[-1].delimiter is not None:
            raise ValueError("a delimiter must follow an undelimited item")
        self.elements[-1].delimiter = delimiter

    # --- Parsing ---

    @classmethod
    def parse_terminated(cls, parser: "Parser", parse_item: Callable[[], T], delimiter: TokenType) -> "Delimited[T]":
        """Parse items up to whatever closes the list; the final delimiter is optional.

        The list ends as soon as an item or a delimiter fails to match, which
        in practice is the closing bracket of the enclosing construct. A
        delimiter that is not followed by another item is kept as trailing.
        """
        result = cls()
        item = _attempt_progressing(parser, parse_item)
        if item is None:
            return result
        result.push(item)

        while True:
            delim = parser.eat(delimiter)
            if delim is None:
                break
            result.push_trailing(delim)
            item = _attempt_progressing(parser, parse_item)
            if item is None:
                break
            result.push(item)
        return result

    @classmethod
    def parse_separated(cls, parser: "Parser", parse_item: Callable[[], T], delimiter: TokenType) -> "Delimited[T]":
        """Parse items while a delimiter followed by another item matches.

        A delimiter with no item after it is left for the caller.
        """
        result = cls()
        item = _attempt_progressing(parser, parse_item)
        if item is None:
            return result
        result.push(item)
        result._parse_separated_tail(parser, parse_item, delimiter)
        return result

    @classmethod
    def parse_separated_nonempty(cls, parser: "Parser", parse_item: Callable[[], T], delimiter: TokenType) -> "Delimited[T]":
        # The first item is mandatory, so its own failure (with its own label) propagates.
        result = cls()
        start = parser.position
        result.push(parse_item())
        if parser.position == start:
            raise parser.error("List item consumed no input")
        result._parse_separated_tail(parser, parse_item, delimiter)
        return result

    def _parse_separated_tail(self, parser: "Parser", parse_item: Callable[[], T], delimiter: TokenType) -> None:
        def delimiter_then_item():
            delim = parser.expect(delimiter, f"Expected '{Token.default(delimiter).lexeme}'")
            return delim, parse_item()

        while True:
            step = _attempt_progressing(parser, delimiter_then_item)
            if step is None:
                break
            delim, item = step
            self.push_trailing(delim)
            self.push(item)


def _attempt_progressing(parser: "Parser", rule: Callable[[], T]) -> Optional[T]:
    """Run ``rule`` speculatively; a success that consumed nothing counts as a miss."""
    checkpoint = parser.checkpoint()
    result = parser.attempt(rule)
    if result is not None and parser.position == checkpoint.position:
        parser.rewind(checkpoint)
        return None
    return result
