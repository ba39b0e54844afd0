from dataclasses import dataclass
from typing import Callable, List, Optional, TypeVar
from genclause.lexer import Lexer, Token, TokenType
from genclause.diagnostics import DiagnosticEngine, Span
from genclause.delimited import Delimited
from genclause.ast_nodes import (
    Attribute,
    Path, PathSegment, AngleBracketedArgs, ParenthesizedArgs, TypeBinding,
    GenericArgument, PathArguments,
    Type, TypePath, TypeReference, TypeTuple, TypeSlice, TypeNever, TypeTraitObject,
    Generics, LifetimeDef, BoundLifetimes, TypeParam,
    TypeParamBound, TraitBound, RegionBound, MaybeModifier, PolyTraitRef,
    WhereClause, WherePredicate, BoundPredicate, RegionPredicate,
)

T = TypeVar("T")

@dataclass(frozen=True)
class ParserCheckpoint:
    position: int
    diagnostics_len: int

class Parser:
    """Recursive-descent parser for generics clauses over a token list.

    Every ``parse_*`` method either returns a complete node or raises
    ``ParseError``. Speculative branches go through ``attempt``/``alt``, which
    rewind the cursor when a branch fails, so a failed alternative leaves no
    trace.
    """

    def __init__(self, tokens: List[Token], diagnostics: DiagnosticEngine):
        self.tokens = tokens
        self.diagnostics = diagnostics
        self.current = 0

    def parse(self, rule: Callable[["Parser"], T]) -> T:
        """Run ``rule`` over the whole token list and report a failure once."""
        try:
            node = rule(self)
            if not self._is_at_end():
                raise self.error(f"Unexpected '{self._peek().lexeme}'", hint="expected end of input")
            return node
        except ParseError as e:
            self.diagnostics.error(e.message, e.span, e.hint)
            raise

    # --- Generics ---

    def parse_generics(self) -> Generics:
        lt_token = self.eat(TokenType.LT)
        if lt_token is None:
            return Generics()

        lifetimes = Delimited.parse_terminated(self, self.parse_lifetime_def, TokenType.COMMA)
        ty_params = Delimited()
        # Type params may only follow a lifetime list that is empty or ends in ','.
        if lifetimes.empty_or_trailing():
            ty_params = Delimited.parse_terminated(self, self.parse_type_param, TokenType.COMMA)
        gt_token = self.expect(TokenType.GT, "Expected '>' after generic parameters")

        return Generics(lifetimes, ty_params, lt_token, gt_token)

    def parse_bound_lifetimes(self) -> BoundLifetimes:
        for_token = self.expect(TokenType.FOR, "Expected 'for'")
        lt_token = self.expect(TokenType.LT, "Expected '<' after 'for'")
        lifetimes = Delimited.parse_terminated(self, self.parse_lifetime_def, TokenType.COMMA)
        gt_token = self.expect(TokenType.GT, "Expected '>' after bound lifetimes")
        return BoundLifetimes(lifetimes, for_token, lt_token, gt_token)

    def parse_lifetime_def(self) -> LifetimeDef:
        attrs = self.parse_attributes()
        lifetime = self.expect(TokenType.LIFETIME, "Expected lifetime definition")
        colon_token = self.eat(TokenType.COLON)
        bounds = Delimited()
        if colon_token is not None:
            bounds = Delimited.parse_separated_nonempty(self, self.parse_lifetime, TokenType.PLUS)
        return LifetimeDef(lifetime, attrs, colon_token, bounds)

    def parse_type_param(self) -> TypeParam:
        attrs = self.parse_attributes()
        ident = self.expect(TokenType.IDENTIFIER, "Expected type parameter")
        colon_token = self.eat(TokenType.COLON)
        bounds = Delimited()
        if colon_token is not None:
            bounds = Delimited.parse_separated_nonempty(self, self.parse_type_param_bound, TokenType.PLUS)

        eq_token, default = None, None
        default_part = self.attempt(self._type_param_default)
        if default_part is not None:
            eq_token, default = default_part

        return TypeParam(ident, attrs, colon_token, bounds, eq_token, default)

    def _type_param_default(self):
        eq_token = self.expect(TokenType.EQ, "Expected '='")
        return eq_token, self.parse_type()

    def parse_type_param_bound(self) -> TypeParamBound:
        return self.alt(
            self._maybe_trait_bound,
            self._region_bound,
            self._trait_bound,
            expected="Expected type parameter bound",
        )

    def _maybe_trait_bound(self) -> TraitBound:
        question_token = self.expect(TokenType.QUESTION, "Expected '?'")
        return TraitBound(self.parse_poly_trait_ref(), MaybeModifier(question_token))

    def _region_bound(self) -> RegionBound:
        return RegionBound(self.parse_lifetime())

    def _trait_bound(self) -> TraitBound:
        return TraitBound(self.parse_poly_trait_ref())

    def parse_poly_trait_ref(self) -> PolyTraitRef:
        bound_lifetimes = None
        if self._check(TokenType.FOR):
            bound_lifetimes = self.attempt(self.parse_bound_lifetimes)
        trait_ref = self.parse_path()
        return PolyTraitRef(trait_ref, bound_lifetimes)

    # --- Where clauses ---

    def parse_where_clause(self) -> WhereClause:
        where_token = self.eat(TokenType.WHERE)
        if where_token is None:
            return WhereClause.none()
        # Predicates run until the owner's body or terminator ('{', ';', ...).
        predicates = Delimited.parse_terminated(self, self.parse_where_predicate, TokenType.COMMA)
        return WhereClause(where_token, predicates)

    def parse_where_predicate(self) -> WherePredicate:
        # EqPredicate ('T = U') is never produced here.
        return self.alt(
            self._region_predicate,
            self._bound_predicate,
            expected="Expected where predicate",
        )

    def _region_predicate(self) -> RegionPredicate:
        lifetime = self.parse_lifetime()
        colon_token = self.eat(TokenType.COLON)
        bounds = Delimited()
        if colon_token is not None:
            bounds = Delimited.parse_separated(self, self.parse_lifetime, TokenType.PLUS)
        return RegionPredicate(lifetime, colon_token, bounds)

    def _bound_predicate(self) -> BoundPredicate:
        bound_lifetimes = None
        if self._check(TokenType.FOR):
            bound_lifetimes = self.attempt(self.parse_bound_lifetimes)
        bounded_ty = self.parse_type()
        colon_token = self.expect(TokenType.COLON, "Expected ':' after bounded type")
        bounds = Delimited.parse_separated_nonempty(self, self.parse_type_param_bound, TokenType.PLUS)
        return BoundPredicate(bounded_ty, bounds, bound_lifetimes, colon_token)

    # --- Attributes ---

    def parse_attributes(self) -> List[Attribute]:
        attrs = []
        while self._check(TokenType.POUND):
            attr = self.attempt(self.parse_attribute)
            if attr is None:
                break
            attrs.append(attr)
        return attrs

    def parse_attribute(self) -> Attribute:
        """Parse an outer attribute '#[...]', keeping its contents as raw tokens."""
        pound_token = self.expect(TokenType.POUND, "Expected '#'")
        bracket_open = self.expect(TokenType.LBRACKET, "Expected '[' after '#'")

        tts = []
        depth = 0
        closers = {TokenType.RPAREN, TokenType.RBRACKET, TokenType.RBRACE}
        openers = {TokenType.LPAREN, TokenType.LBRACKET, TokenType.LBRACE}
        while not (depth == 0 and self._check(TokenType.RBRACKET)):
            if self._is_at_end():
                raise self.error("Unterminated attribute", hint="add the closing ']'")
            token = self._advance()
            if token.type in openers:
                depth += 1
            elif token.type in closers:
                depth -= 1
            tts.append(token)

        bracket_close = self.expect(TokenType.RBRACKET, "Expected ']' after attribute")
        return Attribute(tts, pound_token, bracket_open, bracket_close)

    # --- Types and paths ---

    def parse_lifetime(self) -> Token:
        return self.expect(TokenType.LIFETIME, "Expected lifetime")

    def parse_type(self) -> Type:
        if self._check(TokenType.AMPERSAND):
            and_token = self._advance()
            lifetime = self.eat(TokenType.LIFETIME)
            mut_token = self.eat(TokenType.MUT)
            return TypeReference(self.parse_type(), lifetime, mut_token, and_token)

        if self._check(TokenType.LPAREN):
            paren_open = self._advance()
            elems = Delimited.parse_terminated(self, self.parse_type, TokenType.COMMA)
            paren_close = self.expect(TokenType.RPAREN, "Expected ')' after tuple type")
            return TypeTuple(elems, paren_open, paren_close)

        if self._check(TokenType.LBRACKET):
            bracket_open = self._advance()
            elem = self.parse_type()
            bracket_close = self.expect(TokenType.RBRACKET, "Expected ']' after slice type")
            return TypeSlice(elem, bracket_open, bracket_close)

        if self._check(TokenType.BANG):
            return TypeNever(self._advance())

        if self._check(TokenType.DYN):
            dyn_token = self._advance()
            bounds = Delimited.parse_separated_nonempty(self, self.parse_type_param_bound, TokenType.PLUS)
            return TypeTraitObject(bounds, dyn_token)

        if self._check(TokenType.IDENTIFIER) or self._check(TokenType.COLONCOLON):
            return TypePath(self.parse_path())

        raise self.error("Expected type")

    def parse_path(self) -> Path:
        """Parse a path like '::std::vec::Vec<T>' or 'Fn(u8) -> bool'."""
        leading_colon = self.eat(TokenType.COLONCOLON)
        segments = Delimited()
        segments.push(self._path_segment())
        while self._check(TokenType.COLONCOLON) and self._peek(1).type == TokenType.IDENTIFIER:
            segments.push_trailing(self._advance())
            segments.push(self._path_segment())
        return Path(segments, leading_colon)

    def _path_segment(self) -> PathSegment:
        ident = self.expect(TokenType.IDENTIFIER, "Expected path segment")
        arguments: Optional[PathArguments] = None
        if self._check(TokenType.LT):
            arguments = self._angle_bracketed_args(None)
        elif self._check(TokenType.COLONCOLON) and self._peek(1).type == TokenType.LT:
            arguments = self._angle_bracketed_args(self._advance())
        elif self._check(TokenType.LPAREN):
            arguments = self._parenthesized_args()
        return PathSegment(ident, arguments)

    def _angle_bracketed_args(self, colon2_token: Optional[Token]) -> AngleBracketedArgs:
        lt_token = self.expect(TokenType.LT, "Expected '<'")
        args = Delimited.parse_terminated(self, self._generic_argument, TokenType.COMMA)
        gt_token = self.expect(TokenType.GT, "Expected '>' after type arguments")
        return AngleBracketedArgs(args, colon2_token, lt_token, gt_token)

    def _generic_argument(self) -> GenericArgument:
        return self.alt(
            self.parse_lifetime,
            self._type_binding,
            self.parse_type,
            expected="Expected type argument",
        )

    def _type_binding(self) -> TypeBinding:
        ident = self.expect(TokenType.IDENTIFIER, "Expected associated type name")
        eq_token = self.expect(TokenType.EQ, "Expected '='")
        return TypeBinding(ident, self.parse_type(), eq_token)

    def _parenthesized_args(self) -> ParenthesizedArgs:
        paren_open = self.expect(TokenType.LPAREN, "Expected '('")
        inputs = Delimited.parse_terminated(self, self.parse_type, TokenType.COMMA)
        paren_close = self.expect(TokenType.RPAREN, "Expected ')' after argument types")
        output = None
        arrow_token = self.eat(TokenType.ARROW)
        if arrow_token is not None:
            output = self.parse_type()
        return ParenthesizedArgs(inputs, output, arrow_token, paren_open, paren_close)

    # --- Cursor ---

    @property
    def position(self) -> int:
        return self.current

    def checkpoint(self) -> ParserCheckpoint:
        return ParserCheckpoint(self.current, len(self.diagnostics.diagnostics))

    def rewind(self, checkpoint: ParserCheckpoint):
        self.current = checkpoint.position
        del self.diagnostics.diagnostics[checkpoint.diagnostics_len:]

    def attempt(self, rule: Callable[[], T]) -> Optional[T]:
        """Try ``rule``; on failure restore the cursor and return None."""
        checkpoint = self.checkpoint()
        try:
            return rule()
        except ParseError:
            self.rewind(checkpoint)
            return None

    def alt(self, *rules: Callable[[], T], expected: str) -> T:
        """Return the result of the first rule that matches, in order."""
        for rule in rules:
            result = self.attempt(rule)
            if result is not None:
                return result
        raise self.error(expected)

    def eat(self, type: TokenType) -> Optional[Token]:
        if self._check(type):
            return self._advance()
        return None

    def expect(self, type: TokenType, message: str) -> Token:
        return self._consume(type, message)

    def error(self, message: str, hint: Optional[str] = None) -> "ParseError":
        token = self._peek()
        found = token.lexeme if token.type != TokenType.EOF else "end of input"
        if hint is None and not message.startswith("Unexpected"):
            hint = f"found '{found}'"
        return ParseError(message, token.span, hint)

    # --- Helpers ---

    def _check(self, type: TokenType) -> bool:
        if self._is_at_end():
            return type == TokenType.EOF
        return self.tokens[self.current].type == type

    def _peek(self, offset: int = 0) -> Token:
        index = min(self.current + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def _advance(self) -> Token:
        if not self._is_at_end():
            self.current += 1
        return self.tokens[self.current - 1]

    def _is_at_end(self) -> bool:
        return self.tokens[self.current].type == TokenType.EOF

    def _consume(self, type: TokenType, message: str) -> Token:
        if self._check(type):
            return self._advance()
        raise self.error(message)

def parse_str(source: str, rule: Callable[[Parser], T], diagnostics: Optional[DiagnosticEngine] = None) -> T:
    """Lex ``source`` and parse all of it with ``rule``, e.g. ``Parser.parse_generics``."""
    if diagnostics is None:
        diagnostics = DiagnosticEngine(echo=False)
    tokens = Lexer(source, diagnostics).tokenize()
    bad = next((t for t in tokens if t.type == TokenType.ERROR), None)
    if bad is not None:
        raise ParseError(f"Unexpected character: '{bad.lexeme}'", bad.span)
    return Parser(tokens, diagnostics).parse(rule)

class ParseError(Exception):
    def __init__(self, message: str, span: Span, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.span = span
        self.hint = hint

    def __str__(self):
        return f"{self.message} at {self.span}"
