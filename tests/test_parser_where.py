import unittest
from genclause.lexer import Lexer, TokenType
from genclause.parser import Parser, ParseError, parse_str
from genclause.diagnostics import DiagnosticEngine
from genclause.ast_nodes import (
    WhereClause, BoundPredicate, RegionPredicate, EqPredicate,
    TypePath, TraitBound, RegionBound,
)

class TestWhereClause(unittest.TestCase):
    def setUp(self):
        self.diagnostics = DiagnosticEngine(echo=False)

    def parse(self, source, rule=Parser.parse_where_clause):
        return parse_str(source, rule, self.diagnostics)

    def test_no_where_clause(self):
        clause = self.parse("")
        self.assertEqual(clause, WhereClause.none())
        self.assertIsNone(clause.where_token)

    def test_mixed_predicates(self):
        clause = self.parse("where T: Clone, 'a: 'b + 'c, for<'x> F: Fn(&'x u8)")
        predicates = list(clause.predicates)

        self.assertEqual(clause.where_token.type, TokenType.WHERE)
        self.assertEqual(len(predicates), 3)
        self.assertIsInstance(predicates[0], BoundPredicate)
        self.assertIsInstance(predicates[1], RegionPredicate)
        self.assertIsInstance(predicates[2], BoundPredicate)

        self.assertEqual(predicates[0].bounded_ty, TypePath.from_name("T"))
        self.assertIsNone(predicates[0].bound_lifetimes)
        self.assertEqual([t.lexeme for t in predicates[1].bounds], ["'b", "'c"])
        self.assertIsNotNone(predicates[2].bound_lifetimes)
        self.assertEqual(predicates[2].bounded_ty, TypePath.from_name("F"))

    def test_keyword_without_predicates(self):
        clause = self.parse("where")
        self.assertIsNotNone(clause.where_token)
        self.assertTrue(clause.predicates.is_empty())
        self.assertNotEqual(clause, WhereClause.none())

    def test_stops_before_body(self):
        parser = Parser(Lexer("where T: Copy, U: Send {", self.diagnostics).tokenize(), self.diagnostics)
        clause = parser.parse_where_clause()

        self.assertEqual(len(clause.predicates), 2)
        self.assertFalse(clause.predicates.trailing_delim())
        self.assertEqual(parser.tokens[parser.position].type, TokenType.LBRACE)

    def test_trailing_comma(self):
        clause = self.parse("where T: Clone,")
        self.assertTrue(clause.predicates.trailing_delim())

    def test_region_predicate_with_empty_bounds(self):
        predicate = self.parse("'a:", Parser.parse_where_predicate)
        self.assertIsInstance(predicate, RegionPredicate)
        self.assertIsNotNone(predicate.colon_token)
        self.assertTrue(predicate.bounds.is_empty())

        bare = self.parse("'a", Parser.parse_where_predicate)
        self.assertIsNone(bare.colon_token)

    def test_bound_predicate_needs_bounds(self):
        with self.assertRaises(ParseError) as ctx:
            self.parse("T:", Parser.parse_where_predicate)
        self.assertEqual(ctx.exception.message, "Expected where predicate")

        with self.assertRaises(ParseError):
            self.parse("T", Parser.parse_where_predicate)

    def test_bound_kinds(self):
        predicate = self.parse("Vec<T>: 'static + ?Sized", Parser.parse_where_predicate)
        self.assertIsInstance(predicate.bounds[0], RegionBound)
        self.assertIsInstance(predicate.bounds[1], TraitBound)

    def test_equality_predicate_is_never_parsed(self):
        with self.assertRaises(ParseError):
            self.parse("T = U", Parser.parse_where_predicate)

        for source in ["'a", "'a: 'b", "T: Copy", "for<'a> &'a T: Debug", "[T]: Sized"]:
            predicate = self.parse(source, Parser.parse_where_predicate)
            self.assertNotIsInstance(predicate, EqPredicate)
            self.assertIsInstance(predicate, (BoundPredicate, RegionPredicate))

if __name__ == '__main__':
    unittest.main()
