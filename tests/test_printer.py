from genclause.lexer import Token, TokenType
from genclause.parser import Parser, parse_str
from genclause.delimited import Delimited
from genclause.ast_nodes import (
    Generics, LifetimeDef, TypeParam, WhereClause, EqPredicate, TypePath,
    ImplGenerics, TypeGenerics,
)
from genclause.printer import TokenStream, to_tokens, to_token_stream, render

def generics(source):
    return parse_str(source, Parser.parse_generics)

def test_declaration_view():
    source = "<'a: 'b, T: Clone = u8>"
    assert render(generics(source)) == source

def test_impl_view_drops_defaults():
    impl_generics, _, _ = generics("<T = u8>").split_for_impl()
    tokens = to_token_stream(impl_generics)

    assert tokens.lexemes() == ["<", "T", ">"]

def test_impl_view_keeps_attributes_and_bounds():
    impl_generics, _, _ = generics("<#[cfg(x)] T: Copy = u8>").split_for_impl()
    assert render(impl_generics) == "<#[cfg(x)] T: Copy>"

def test_type_view_keeps_names_only():
    _, ty_generics, _ = generics("<'a: 'b, T: Clone = u8>").split_for_impl()

    assert to_token_stream(ty_generics).lexemes() == ["<", "'a", ",", "T", ">"]
    assert render(ty_generics) == "<'a, T>"

def test_type_view_reproduces_trailing_delimiters():
    _, ty_generics, _ = generics("<'a, T: Copy,>").split_for_impl()
    assert render(ty_generics) == "<'a, T,>"

def test_turbofish():
    _, ty_generics, _ = generics("<'a, T>").split_for_impl()
    assert render(ty_generics.as_turbofish()) == "::<'a, T>"

    _, empty, _ = Generics().split_for_impl()
    assert to_token_stream(empty.as_turbofish()).is_empty()

def test_empty_generics_print_nothing():
    with_where = generics("<>")
    with_where.where_clause = parse_str("where T: Copy", Parser.parse_where_clause)
    impl_generics, ty_generics, where_clause = with_where.split_for_impl()

    assert len(to_token_stream(with_where)) == 0
    assert len(to_token_stream(impl_generics)) == 0
    assert len(to_token_stream(ty_generics)) == 0
    assert render(where_clause) == "where T: Copy"

def test_split_for_impl_shares_generics():
    original = generics("<T>")
    impl_generics, ty_generics, where_clause = original.split_for_impl()

    assert impl_generics.generics is original
    assert ty_generics.generics is original
    assert where_clause is original.where_clause
    assert impl_generics == ImplGenerics(original)
    assert ty_generics == TypeGenerics(original)

def test_views_are_hashable_by_source():
    original = generics("<T>")
    twin = generics("<T>")
    _, ty_generics, _ = original.split_for_impl()

    assert hash(ImplGenerics(original)) == hash(ImplGenerics(original))
    assert len({ty_generics, TypeGenerics(original), ty_generics.as_turbofish()}) == 2
    assert TypeGenerics(original) != TypeGenerics(twin)
    assert ImplGenerics(original) != TypeGenerics(original)

def test_synthetic_comma_between_lists():
    built = Generics(
        lifetimes=Delimited.from_items([LifetimeDef.new(Token.lifetime("a"))], TokenType.COMMA),
        ty_params=Delimited.from_items([TypeParam.from_ident(Token.ident("T"))], TokenType.COMMA),
    )

    for view in (built, *built.split_for_impl()[:2]):
        assert to_token_stream(view).lexemes() == ["<", "'a", ",", "T", ">"]

def test_no_extra_comma_after_trailing_lifetime():
    assert render(generics("<'a, T>")) == "<'a, T>"
    assert render(generics("<'a,>")) == "<'a,>"

def test_where_clause_elision():
    keyword_only = WhereClause(where_token=Token.default(TokenType.WHERE))

    assert keyword_only != WhereClause.none()
    assert len(to_token_stream(keyword_only)) == 0
    assert len(to_token_stream(WhereClause.none())) == 0

def test_where_clause_rendering():
    source = "where for<'a> F: Fn(&'a u8) -> bool, 'a: 'b"
    assert render(parse_str(source, Parser.parse_where_clause)) == source

def test_eq_predicate_prints():
    predicate = EqPredicate(TypePath.from_name("T"), TypePath.from_name("U"))
    clause = WhereClause(predicates=Delimited.from_items([predicate], TokenType.COMMA))

    assert render(clause) == "where T = U"

def test_colon_without_bounds_prints_bare_name():
    param = TypeParam(Token.ident("T"), colon_token=Token.default(TokenType.COLON))
    assert render(param) == "T"

def test_missing_tokens_are_synthesized():
    param = TypeParam.from_ident(Token.ident("T"))
    param.default = TypePath.from_name("u8")
    assert render(param) == "T = u8"

def test_types_render_back():
    for source in ["&'a mut [T]", "(A, B,)", "dyn Iterator<Item = T> + Send", "::std::vec::Vec<T>", "Vec::<T>", "Fn() -> !"]:
        assert render(parse_str(source, Parser.parse_type)) == source

def test_to_tokens_appends():
    stream = TokenStream()
    original = generics("<'a, T>")
    _, ty_generics, _ = original.split_for_impl()

    to_tokens(Token.ident("S"), stream)
    to_tokens(ty_generics, stream)

    assert str(stream) == "S<'a, T>"

def test_round_trip():
    for source in ["<'a>", "<'a,>", "<'a, T: Clone>", "<T = u8>"]:
        parsed = generics(source)
        assert generics(render(parsed)) == parsed

    # "<>" does not round-trip: empty brackets print as nothing, so the reparse
    # has no lt/gt tokens and equals the canonical empty value.
    assert generics(render(generics("<>"))) == Generics()
