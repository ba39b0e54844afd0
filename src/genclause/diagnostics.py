from dataclasses import dataclass
from typing import List, Optional
from rich.console import Console

@dataclass
class Span:
    start: int
    end: int
    line: int
    column: int

    def __repr__(self):
        return f"{self.line}:{self.column}"

    @classmethod
    def call_site(cls) -> "Span":
        """Span for tokens synthesized by the printer or by direct construction."""
        return cls(0, 0, 0, 0)

@dataclass
class Diagnostic:
    message: str
    span: Span
    level: str = "error"  # error, warning, info
    hint: Optional[str] = None

class DiagnosticEngine:
    def __init__(self, echo: bool = True):
        self.diagnostics: List[Diagnostic] = []
        self.echo = echo
        self.console = Console(stderr=True)

    @property
    def has_errors(self) -> bool:
        return any(d.level == "error" for d in self.diagnostics)

    def report(self, level: str, message: str, span: Span, hint: Optional[str] = None):
        diag = Diagnostic(message, span, level, hint)
        self.diagnostics.append(diag)
        if self.echo:
            color = "red" if level == "error" else "yellow"
            self.console.print(f"[{color} bold]{level.upper()}:[/] {message} at {span}")
            if hint:
                self.console.print(f"  [blue]Hint:[/blue] {hint}")

    def error(self, message: str, span: Span, hint: Optional[str] = None):
        self.report("error", message, span, hint)
