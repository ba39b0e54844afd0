from typing import Iterator, List, Optional
from genclause.lexer import Token, TokenType
from genclause.delimited import Delimited
from genclause.ast_nodes import (
    Attribute,
    Path, PathSegment, AngleBracketedArgs, ParenthesizedArgs, TypeBinding,
    TypePath, TypeReference, TypeTuple, TypeSlice, TypeNever, TypeTraitObject,
    Generics, ImplGenerics, TypeGenerics, Turbofish,
    LifetimeDef, BoundLifetimes, TypeParam,
    TraitBound, RegionBound, NoModifier, MaybeModifier, PolyTraitRef,
    WhereClause, BoundPredicate, RegionPredicate, EqPredicate,
)

# Tokens that hug their right / left neighbour when rendered as text.
_NO_SPACE_AFTER = {
    TokenType.LT, TokenType.LPAREN, TokenType.LBRACKET, TokenType.COLONCOLON,
    TokenType.AMPERSAND, TokenType.QUESTION, TokenType.POUND,
}
_NO_SPACE_BEFORE = {
    TokenType.COMMA, TokenType.GT, TokenType.RPAREN, TokenType.RBRACKET,
    TokenType.COLON, TokenType.COLONCOLON,
}

class TokenStream:
    """Append-only sequence of tokens produced by the printer."""

    def __init__(self):
        self._tokens: List[Token] = []

    def append(self, token: Token):
        self._tokens.append(token)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def is_empty(self) -> bool:
        return not self._tokens

    def lexemes(self) -> List[str]:
        return [t.lexeme for t in self._tokens]

    def __str__(self) -> str:
        parts = []
        prev = None
        for token in self._tokens:
            if prev is not None and not _joins(prev, token):
                parts.append(" ")
            parts.append(token.lexeme)
            prev = token
        return "".join(parts)

def _joins(prev: Token, token: Token) -> bool:
    if prev.type in _NO_SPACE_AFTER or token.type in _NO_SPACE_BEFORE:
        return True
    # Vec<T>, Fn(u8), for<'a>
    return token.type in (TokenType.LT, TokenType.LPAREN) and prev.type in (TokenType.IDENTIFIER, TokenType.FOR)

def _empty_normal_generics(generics: Generics) -> bool:
    """True if there are no lifetimes and no type params, whatever the where clause holds."""
    return generics.lifetimes.is_empty() and generics.ty_params.is_empty()

class Printer:
    def __init__(self, tokens: Optional[TokenStream] = None):
        self.tokens = tokens if tokens is not None else TokenStream()

    def emit(self, node) -> TokenStream:
        if isinstance(node, Token):
            self.tokens.append(node)
        elif isinstance(node, Delimited):
            self._emit_delimited(node)
        elif isinstance(node, Generics):
            self._emit_generics(node)
        elif isinstance(node, ImplGenerics):
            self._emit_impl_generics(node.generics)
        elif isinstance(node, TypeGenerics):
            self._emit_type_generics(node.generics)
        elif isinstance(node, Turbofish):
            self._emit_turbofish(node.generics)
        elif isinstance(node, LifetimeDef):
            self._emit_lifetime_def(node)
        elif isinstance(node, TypeParam):
            self._emit_type_param(node)
        elif isinstance(node, BoundLifetimes):
            self._emit_bound_lifetimes(node)
        elif isinstance(node, TraitBound):
            self.emit(node.modifier)
            self.emit(node.trait_ref)
        elif isinstance(node, RegionBound):
            self.tokens.append(node.lifetime)
        elif isinstance(node, NoModifier):
            pass
        elif isinstance(node, MaybeModifier):
            self.tokens.append(node.question_token)
        elif isinstance(node, PolyTraitRef):
            if node.bound_lifetimes is not None:
                self.emit(node.bound_lifetimes)
            self.emit(node.trait_ref)
        elif isinstance(node, WhereClause):
            self._emit_where_clause(node)
        elif isinstance(node, BoundPredicate):
            self._emit_bound_predicate(node)
        elif isinstance(node, RegionPredicate):
            self._emit_region_predicate(node)
        elif isinstance(node, EqPredicate):
            self.emit(node.lhs_ty)
            self.tokens.append(node.eq_token)
            self.emit(node.rhs_ty)
        elif isinstance(node, Attribute):
            self._emit_attribute(node)
        elif isinstance(node, (Path, PathSegment, AngleBracketedArgs, ParenthesizedArgs, TypeBinding)):
            self._emit_path_part(node)
        elif isinstance(node, (TypePath, TypeReference, TypeTuple, TypeSlice, TypeNever, TypeTraitObject)):
            self._emit_type(node)
        else:
            raise TypeError(f"Cannot print {type(node).__name__}")
        return self.tokens

    # --- Generics views ---

    def _emit_generics(self, generics: Generics):
        if _empty_normal_generics(generics):
            return
        self._emit_or_default(generics.lt_token, TokenType.LT)
        self.emit(generics.lifetimes)
        self._maybe_add_lifetime_params_comma(generics)
        self.emit(generics.ty_params)
        self._emit_or_default(generics.gt_token, TokenType.GT)

    def _emit_impl_generics(self, generics: Generics):
        if _empty_normal_generics(generics):
            return
        self._emit_or_default(generics.lt_token, TokenType.LT)
        self.emit(generics.lifetimes)
        self._maybe_add_lifetime_params_comma(generics)
        for pair in generics.ty_params.pairs():
            # Defaults are only legal where the type is declared
            param = pair.item
            self._emit_attrs(param.attrs)
            self.tokens.append(param.ident)
            self._emit_type_param_bounds(param)
            self._emit_optional(pair.delimiter)
        self._emit_or_default(generics.gt_token, TokenType.GT)

    def _emit_type_generics(self, generics: Generics):
        if _empty_normal_generics(generics):
            return
        self._emit_or_default(generics.lt_token, TokenType.LT)
        # Names only: no attributes, bounds or defaults
        for pair in generics.lifetimes.pairs():
            self.tokens.append(pair.item.lifetime)
            self._emit_optional(pair.delimiter)
        self._maybe_add_lifetime_params_comma(generics)
        for pair in generics.ty_params.pairs():
            self.tokens.append(pair.item.ident)
            self._emit_optional(pair.delimiter)
        self._emit_or_default(generics.gt_token, TokenType.GT)

    def _emit_turbofish(self, generics: Generics):
        if not _empty_normal_generics(generics):
            self.tokens.append(Token.default(TokenType.COLONCOLON))
            self._emit_type_generics(generics)

    def _maybe_add_lifetime_params_comma(self, generics: Generics):
        # Joins "'a" and "T" into "'a, T" when the lifetime list has no trailing comma.
        if not generics.lifetimes.empty_or_trailing() and not generics.ty_params.is_empty():
            self.tokens.append(Token.default(TokenType.COMMA))

    # --- Parameters ---

    def _emit_lifetime_def(self, lifetime_def: LifetimeDef):
        self._emit_attrs(lifetime_def.attrs)
        self.tokens.append(lifetime_def.lifetime)
        if not lifetime_def.bounds.is_empty():
            self._emit_or_default(lifetime_def.colon_token, TokenType.COLON)
            self.emit(lifetime_def.bounds)

    def _emit_type_param(self, param: TypeParam):
        self._emit_attrs(param.attrs)
        self.tokens.append(param.ident)
        self._emit_type_param_bounds(param)
        if param.default is not None:
            self._emit_or_default(param.eq_token, TokenType.EQ)
            self.emit(param.default)

    def _emit_type_param_bounds(self, param: TypeParam):
        if not param.bounds.is_empty():
            self._emit_or_default(param.colon_token, TokenType.COLON)
            self.emit(param.bounds)

    def _emit_bound_lifetimes(self, bound_lifetimes: BoundLifetimes):
        self.tokens.append(bound_lifetimes.for_token)
        self.tokens.append(bound_lifetimes.lt_token)
        self.emit(bound_lifetimes.lifetimes)
        self.tokens.append(bound_lifetimes.gt_token)

    # --- Where clauses ---

    def _emit_where_clause(self, where_clause: WhereClause):
        # An empty predicate list prints nothing, even when 'where' was written.
        if where_clause.predicates.is_empty():
            return
        self._emit_or_default(where_clause.where_token, TokenType.WHERE)
        self.emit(where_clause.predicates)

    def _emit_bound_predicate(self, predicate: BoundPredicate):
        if predicate.bound_lifetimes is not None:
            self.emit(predicate.bound_lifetimes)
        self.emit(predicate.bounded_ty)
        self.tokens.append(predicate.colon_token)
        self.emit(predicate.bounds)

    def _emit_region_predicate(self, predicate: RegionPredicate):
        self.tokens.append(predicate.lifetime)
        if not predicate.bounds.is_empty():
            self._emit_or_default(predicate.colon_token, TokenType.COLON)
            self.emit(predicate.bounds)

    # --- Attributes, paths and types ---

    def _emit_attribute(self, attr: Attribute):
        self.tokens.append(attr.pound_token)
        self.tokens.append(attr.bracket_open)
        for token in attr.tts:
            self.tokens.append(token)
        self.tokens.append(attr.bracket_close)

    def _emit_path_part(self, node):
        if isinstance(node, Path):
            self._emit_optional(node.leading_colon)
            self.emit(node.segments)
        elif isinstance(node, PathSegment):
            self.tokens.append(node.ident)
            if node.arguments is not None:
                self.emit(node.arguments)
        elif isinstance(node, AngleBracketedArgs):
            self._emit_optional(node.colon2_token)
            self.tokens.append(node.lt_token)
            self.emit(node.args)
            self.tokens.append(node.gt_token)
        elif isinstance(node, ParenthesizedArgs):
            self.tokens.append(node.paren_open)
            self.emit(node.inputs)
            self.tokens.append(node.paren_close)
            if node.output is not None:
                self._emit_or_default(node.arrow_token, TokenType.ARROW)
                self.emit(node.output)
        elif isinstance(node, TypeBinding):
            self.tokens.append(node.ident)
            self.tokens.append(node.eq_token)
            self.emit(node.ty)

    def _emit_type(self, ty):
        if isinstance(ty, TypePath):
            self.emit(ty.path)
        elif isinstance(ty, TypeReference):
            self.tokens.append(ty.and_token)
            self._emit_optional(ty.lifetime)
            self._emit_optional(ty.mut_token)
            self.emit(ty.elem)
        elif isinstance(ty, TypeTuple):
            self.tokens.append(ty.paren_open)
            self.emit(ty.elems)
            self.tokens.append(ty.paren_close)
        elif isinstance(ty, TypeSlice):
            self.tokens.append(ty.bracket_open)
            self.emit(ty.elem)
            self.tokens.append(ty.bracket_close)
        elif isinstance(ty, TypeNever):
            self.tokens.append(ty.bang_token)
        elif isinstance(ty, TypeTraitObject):
            self.tokens.append(ty.dyn_token)
            self.emit(ty.bounds)

    # --- Helpers ---

    def _emit_delimited(self, delimited: Delimited):
        for pair in delimited.pairs():
            self.emit(pair.item)
            self._emit_optional(pair.delimiter)

    def _emit_attrs(self, attrs: List[Attribute]):
        for attr in attrs:
            self._emit_attribute(attr)

    def _emit_optional(self, token: Optional[Token]):
        if token is not None:
            self.tokens.append(token)

    def _emit_or_default(self, token: Optional[Token], type: TokenType):
        self.tokens.append(token if token is not None else Token.default(type))

def to_tokens(node, tokens: TokenStream) -> TokenStream:
    """Append the tokens of ``node`` (any grammar node or view) to ``tokens``."""
    return Printer(tokens).emit(node)

def to_token_stream(node) -> TokenStream:
    return Printer().emit(node)

def render(node) -> str:
    return str(to_token_stream(node))
