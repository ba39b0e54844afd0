from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union
from genclause.delimited import Delimited
from genclause.lexer import Token, TokenType

def _token(type: TokenType):
    return field(default_factory=lambda: Token.default(type))

# --- Attributes ---

@dataclass
class Attribute:
    """Outer attribute like '#[cfg(test)]'; the inner tokens are kept verbatim."""
    tts: List[Token] = field(default_factory=list)
    pound_token: Token = _token(TokenType.POUND)
    bracket_open: Token = _token(TokenType.LBRACKET)
    bracket_close: Token = _token(TokenType.RBRACKET)

# --- Paths ---

@dataclass
class TypeBinding:
    """Associated type binding inside angle brackets: 'Item = T'"""
    ident: Token
    ty: 'Type'
    eq_token: Token = _token(TokenType.EQ)

GenericArgument = Union[Token, 'Type', TypeBinding]  # Token is always a lifetime

@dataclass
class AngleBracketedArgs:
    """'<'a, T, Item = U>', optionally written as a turbofish '::<...>'"""
    args: Delimited[GenericArgument] = field(default_factory=Delimited)
    colon2_token: Optional[Token] = None
    lt_token: Token = _token(TokenType.LT)
    gt_token: Token = _token(TokenType.GT)

@dataclass
class ParenthesizedArgs:
    """Function-trait sugar: '(A, B) -> C' in 'Fn(A, B) -> C'"""
    inputs: Delimited['Type'] = field(default_factory=Delimited)
    output: Optional['Type'] = None
    arrow_token: Optional[Token] = None
    paren_open: Token = _token(TokenType.LPAREN)
    paren_close: Token = _token(TokenType.RPAREN)

PathArguments = Union[AngleBracketedArgs, ParenthesizedArgs]

@dataclass
class PathSegment:
    ident: Token
    arguments: Optional[PathArguments] = None

@dataclass
class Path:
    """'std::fmt::Debug', 'Vec<T>', '::core::ops::Fn(u8)'"""
    segments: Delimited[PathSegment]
    leading_colon: Optional[Token] = None

    @classmethod
    def from_ident(cls, ident: Token) -> "Path":
        return cls(Delimited.from_items([PathSegment(ident)], TokenType.COLONCOLON))

# --- Types ---

@dataclass
class TypePath:
    path: Path

    @classmethod
    def from_name(cls, name: str) -> "TypePath":
        return cls(Path.from_ident(Token.ident(name)))

@dataclass
class TypeReference:
    """'&'a mut T'"""
    elem: 'Type'
    lifetime: Optional[Token] = None
    mut_token: Optional[Token] = None
    and_token: Token = _token(TokenType.AMPERSAND)

@dataclass
class TypeTuple:
    elems: Delimited['Type'] = field(default_factory=Delimited)
    paren_open: Token = _token(TokenType.LPAREN)
    paren_close: Token = _token(TokenType.RPAREN)

@dataclass
class TypeSlice:
    elem: 'Type'
    bracket_open: Token = _token(TokenType.LBRACKET)
    bracket_close: Token = _token(TokenType.RBRACKET)

@dataclass
class TypeNever:
    bang_token: Token = _token(TokenType.BANG)

@dataclass
class TypeTraitObject:
    """'dyn Trait + 'a'"""
    bounds: Delimited['TypeParamBound']
    dyn_token: Token = _token(TokenType.DYN)

Type = Union[TypePath, TypeReference, TypeTuple, TypeSlice, TypeNever, TypeTraitObject]

# --- Bounds ---

@dataclass
class LifetimeDef:
    """A lifetime definition, e.g. ''a: 'b + 'c'"""
    lifetime: Token
    attrs: List[Attribute] = field(default_factory=list)
    colon_token: Optional[Token] = None
    bounds: Delimited[Token] = field(default_factory=Delimited)

    @classmethod
    def new(cls, lifetime: Token) -> "LifetimeDef":
        return cls(lifetime)

@dataclass
class BoundLifetimes:
    """Higher-ranked binder 'for<'a, 'b>'"""
    lifetimes: Delimited[LifetimeDef] = field(default_factory=Delimited)
    for_token: Token = _token(TokenType.FOR)
    lt_token: Token = _token(TokenType.LT)
    gt_token: Token = _token(TokenType.GT)

@dataclass
class PolyTraitRef:
    """Trait reference with an optional binder: 'for<'a> Fn(&'a T)'"""
    trait_ref: Path
    bound_lifetimes: Optional[BoundLifetimes] = None

@dataclass
class NoModifier:
    pass

@dataclass
class MaybeModifier:
    """'?Sized'"""
    question_token: Token = _token(TokenType.QUESTION)

TraitBoundModifier = Union[NoModifier, MaybeModifier]

@dataclass
class TraitBound:
    trait_ref: PolyTraitRef
    modifier: TraitBoundModifier = field(default_factory=NoModifier)

@dataclass
class RegionBound:
    lifetime: Token

TypeParamBound = Union[TraitBound, RegionBound]

@dataclass
class TypeParam:
    """A generic type parameter, e.g. 'T: Into<String> = String'"""
    ident: Token
    attrs: List[Attribute] = field(default_factory=list)
    colon_token: Optional[Token] = None
    bounds: Delimited[TypeParamBound] = field(default_factory=Delimited)
    eq_token: Optional[Token] = None
    default: Optional[Type] = None

    @classmethod
    def from_ident(cls, ident: Token) -> "TypeParam":
        return cls(ident)

# --- Where clauses ---

@dataclass
class BoundPredicate:
    """'for<'c> Foo: Send + Clone + 'c'"""
    bounded_ty: Type
    bounds: Delimited[TypeParamBound]
    bound_lifetimes: Optional[BoundLifetimes] = None
    colon_token: Token = _token(TokenType.COLON)

@dataclass
class RegionPredicate:
    """''a: 'b + 'c'"""
    lifetime: Token
    colon_token: Optional[Token] = None
    bounds: Delimited[Token] = field(default_factory=Delimited)

@dataclass
class EqPredicate:
    """'T = U'. Printable, but the parser never produces it."""
    lhs_ty: Type
    rhs_ty: Type
    eq_token: Token = _token(TokenType.EQ)

WherePredicate = Union[BoundPredicate, RegionPredicate, EqPredicate]

@dataclass
class WhereClause:
    where_token: Optional[Token] = None
    predicates: Delimited[WherePredicate] = field(default_factory=Delimited)

    @classmethod
    def none(cls) -> "WhereClause":
        return cls()

# --- Generics ---

@dataclass
class Generics:
    """Lifetimes and type parameters attached to a declaration.

    Lifetimes always precede type parameters, so they are kept as two lists.
    The where clause is parsed separately by whoever owns the declaration and
    attached afterwards.
    """
    lifetimes: Delimited[LifetimeDef] = field(default_factory=Delimited)
    ty_params: Delimited[TypeParam] = field(default_factory=Delimited)
    lt_token: Optional[Token] = None
    gt_token: Optional[Token] = None
    where_clause: WhereClause = field(default_factory=WhereClause.none)

    def split_for_impl(self) -> Tuple["ImplGenerics", "TypeGenerics", WhereClause]:
        """Split into the pieces needed to implement a trait for the declared type.

        For ``struct S<'a, T: Clone = u8> where T: Copy`` the three parts
        render as ``<'a, T: Clone>``, ``<'a, T>`` and ``where T: Copy``,
        ready for ``impl<'a, T: Clone> Trait for S<'a, T> where T: Copy``.
        """
        return ImplGenerics(self), TypeGenerics(self), self.where_clause

# Views share the Generics they were split from; they hold no data of their own.
# Two views are equal when they borrow the same Generics object.

class _View:
    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.generics is other.generics

    def __hash__(self):
        return hash((type(self), id(self.generics)))

@dataclass(frozen=True, eq=False)
class ImplGenerics(_View):
    """Generics as written after 'impl': bounds kept, defaults dropped."""
    generics: Generics

@dataclass(frozen=True, eq=False)
class TypeGenerics(_View):
    """Generics as written after the type name: bare parameter names."""
    generics: Generics

    def as_turbofish(self) -> "Turbofish":
        return Turbofish(self.generics)

@dataclass(frozen=True, eq=False)
class Turbofish(_View):
    """Type generics in expression position: '::<'a, T>'"""
    generics: Generics
