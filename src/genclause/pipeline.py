from pathlib import Path
from typing import Dict, Any
import json

from genclause.lexer import Lexer, Token, TokenType
from genclause.parser import Parser, ParseError
from genclause.ast_nodes import Generics
from genclause.printer import render
from genclause.diagnostics import DiagnosticEngine

class PipelineError(Exception):
    pass

def parse_clause(parser: Parser) -> Generics:
    """Parse '<...>' followed by an optional where clause, attaching the latter."""
    generics = parser.parse_generics()
    generics.where_clause = parser.parse_where_clause()
    return generics

def render_views(generics: Generics) -> Dict[str, str]:
    impl_generics, ty_generics, where_clause = generics.split_for_impl()
    return {
        "declaration": render(generics),
        "impl": render(impl_generics),
        "type": render(ty_generics),
        "turbofish": render(ty_generics.as_turbofish()),
        "where": render(where_clause),
    }

class GenericsPipeline:
    def __init__(self, source_path: str, export_json: bool = False, diagnostics: DiagnosticEngine = None):
        self.source_path = Path(source_path)
        self.export_json = export_json
        self.source_code = ""
        self.artifacts: Dict[str, Any] = {}
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticEngine()
        self.tokens = []

    def tokenize(self):
        self._read_source()
        lexer = Lexer(self.source_code, self.diagnostics)
        self.tokens = lexer.tokenize()
        self.artifacts["tokens"] = [_token_artifact(t) for t in self.tokens]
        if any(t.type == TokenType.ERROR for t in self.tokens):
            raise PipelineError("Lexing failed")
        return self.tokens

    def run(self) -> Generics:
        """
        Lex and parse the source, then render every view of the clause.
        """
        self.tokenize()

        parser = Parser(self.tokens, self.diagnostics)
        try:
            generics = parser.parse(parse_clause)
        except ParseError as e:
            raise PipelineError(f"Parsing failed: {e}") from e

        self.artifacts["views"] = render_views(generics)

        if self.export_json:
            self._export_json()
        return generics

    def _read_source(self):
        if not self.source_path.exists():
            raise FileNotFoundError(f"Source file not found: {self.source_path}")
        self.source_code = self.source_path.read_text()
        self.artifacts["source"] = self.source_code

    def _export_json(self):
        output_path = self.source_path.with_suffix(".json")
        data = {
            "filename": self.source_path.name,
            "source": self.source_code,
            "tokens": self.artifacts.get("tokens"),
            "views": self.artifacts.get("views"),
        }
        with open(output_path, "w") as f:
            json.dump(data, f, indent=2)
        self.artifacts["json_path"] = str(output_path)

def _token_artifact(token: Token) -> Dict[str, str]:
    return {"type": token.type.name, "lexeme": token.lexeme, "span": str(token.span)}
