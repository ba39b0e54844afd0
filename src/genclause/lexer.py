import re
from enum import Enum, auto
from dataclasses import dataclass, field
from typing import List
from genclause.diagnostics import Span, DiagnosticEngine

class TokenType(Enum):
    # Keywords
    WHERE = auto()
    FOR = auto()
    MUT = auto()
    DYN = auto()

    # Literals
    LIFETIME = auto()  # 'a, 'static
    INTEGER = auto()
    STRING = auto()
    IDENTIFIER = auto()

    # Operators & Punctuation
    LT = auto()        # <
    GT = auto()        # >
    COMMA = auto()     # ,
    COLON = auto()     # :
    COLONCOLON = auto() # ::
    PLUS = auto()      # +
    QUESTION = auto()  # ?
    EQ = auto()        # =
    LPAREN = auto()    # (
    RPAREN = auto()    # )
    LBRACKET = auto()  # [
    RBRACKET = auto()  # ]
    LBRACE = auto()    # {
    RBRACE = auto()    # }
    SEMICOLON = auto() # ;
    POUND = auto()     # #
    BANG = auto()      # !
    AMPERSAND = auto() # &
    ARROW = auto()     # ->
    DOT = auto()       # .

    # Special
    EOF = auto()
    ERROR = auto()

# Spelling used when the printer has to synthesize a token that the tree
# leaves implicit (e.g. the colon in front of a non-empty bound list).
DEFAULT_LEXEMES = {
    TokenType.WHERE: "where",
    TokenType.FOR: "for",
    TokenType.MUT: "mut",
    TokenType.DYN: "dyn",
    TokenType.LT: "<",
    TokenType.GT: ">",
    TokenType.COMMA: ",",
    TokenType.COLON: ":",
    TokenType.COLONCOLON: "::",
    TokenType.PLUS: "+",
    TokenType.QUESTION: "?",
    TokenType.EQ: "=",
    TokenType.LPAREN: "(",
    TokenType.RPAREN: ")",
    TokenType.LBRACKET: "[",
    TokenType.RBRACKET: "]",
    TokenType.LBRACE: "{",
    TokenType.RBRACE: "}",
    TokenType.SEMICOLON: ";",
    TokenType.POUND: "#",
    TokenType.BANG: "!",
    TokenType.AMPERSAND: "&",
    TokenType.ARROW: "->",
    TokenType.DOT: ".",
}

@dataclass
class Token:
    type: TokenType
    lexeme: str
    # Two tokens are the same syntax wherever they were read from.
    span: Span = field(default_factory=Span.call_site, compare=False)

    @classmethod
    def default(cls, type: TokenType) -> "Token":
        """Build a punctuation or keyword token with its canonical spelling."""
        return cls(type, DEFAULT_LEXEMES[type])

    @classmethod
    def ident(cls, name: str) -> "Token":
        return cls(TokenType.IDENTIFIER, name)

    @classmethod
    def lifetime(cls, name: str) -> "Token":
        if not name.startswith("'"):
            name = "'" + name
        return cls(TokenType.LIFETIME, name)

class Lexer:
    def __init__(self, source: str, diagnostics: DiagnosticEngine):
        self.source = source
        self.diagnostics = diagnostics
        self.tokens: List[Token] = []
        self.current_pos = 0
        self.line = 1
        self.column = 1

        # Regex patterns
        # No '>>' or '<<': nested generics close one bracket at a time.
        self.patterns = [
            (TokenType.LIFETIME, r"'[a-zA-Z_][a-zA-Z0-9_]*"),

            (TokenType.WHERE, r'\bwhere\b'),
            (TokenType.FOR, r'\bfor\b'),
            (TokenType.MUT, r'\bmut\b'),
            (TokenType.DYN, r'\bdyn\b'),

            (TokenType.ARROW, r'->'),
            (TokenType.COLONCOLON, r'::'),
            (TokenType.COLON, r':'),
            (TokenType.LT, r'<'),
            (TokenType.GT, r'>'),
            (TokenType.COMMA, r','),
            (TokenType.PLUS, r'\+'),
            (TokenType.QUESTION, r'\?'),
            (TokenType.EQ, r'='),
            (TokenType.LPAREN, r'\('),
            (TokenType.RPAREN, r'\)'),
            (TokenType.LBRACKET, r'\['),
            (TokenType.RBRACKET, r'\]'),
            (TokenType.LBRACE, r'\{'),
            (TokenType.RBRACE, r'\}'),
            (TokenType.SEMICOLON, r';'),
            (TokenType.POUND, r'#'),
            (TokenType.BANG, r'!'),
            (TokenType.AMPERSAND, r'&'),
            (TokenType.DOT, r'\.'),

            (TokenType.INTEGER, r'\d+'),
            (TokenType.STRING, r'"[^"]*"'),
            (TokenType.IDENTIFIER, r'[a-zA-Z_][a-zA-Z0-9_]*'),
        ]
        self.compiled = [(token_type, re.compile(pattern)) for token_type, pattern in self.patterns]
        self.skip_pattern = re.compile(r'\s+|//.*') # Skip whitespace and comments

    def tokenize(self) -> List[Token]:
        while self.current_pos < len(self.source):
            # Skip whitespace and comments
            match = self.skip_pattern.match(self.source, self.current_pos)
            if match:
                self._advance(match.end() - self.current_pos)
                continue

            matched = False
            for token_type, regex in self.compiled:
                match = regex.match(self.source, self.current_pos)
                if match:
                    lexeme = match.group(0)
                    span = Span(self.current_pos, self.current_pos + len(lexeme), self.line, self.column)
                    self.tokens.append(Token(token_type, lexeme, span))
                    self._advance(len(lexeme))
                    matched = True
                    break

            if not matched:
                char = self.source[self.current_pos]
                span = Span(self.current_pos, self.current_pos + 1, self.line, self.column)
                self.diagnostics.error(f"Unexpected character: '{char}'", span)
                # Emit error token so the parser fails at a precise position
                self.tokens.append(Token(TokenType.ERROR, char, span))
                self._advance(1)

        # EOF Token
        span = Span(self.current_pos, self.current_pos, self.line, self.column)
        self.tokens.append(Token(TokenType.EOF, "", span))
        return self.tokens

    def _advance(self, amount: int):
        # Update line/col tracking
        text = self.source[self.current_pos : self.current_pos + amount]
        for char in text:
            if char == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.current_pos += amount
