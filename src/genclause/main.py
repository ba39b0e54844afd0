import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from genclause.pipeline import GenericsPipeline, PipelineError

app = typer.Typer(
    name="genclause",
    help="Parse and re-print generic parameter clauses",
    add_completion=False,
)
console = Console()

@app.command()
def views(
    source_file: str = typer.Argument(..., help="File holding '<...>' and an optional where clause"),
    json_out: bool = typer.Option(False, "--json", "-j", help="Write tokens and views next to the source file"),
):
    """
    Show the declaration, impl, type and turbofish renderings of a generics clause.
    """
    pipeline = GenericsPipeline(source_file, export_json=json_out)
    try:
        pipeline.run()
    except (PipelineError, FileNotFoundError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)

    table = Table(title=source_file)
    table.add_column("View", style="cyan")
    table.add_column("Rendering")
    for name, text in pipeline.artifacts["views"].items():
        table.add_row(name, escape(text) if text else "[dim](empty)[/dim]")
    console.print(table)
    if json_out:
        console.print(f"[green]Wrote {pipeline.artifacts['json_path']}[/green]")

@app.command()
def tokens(
    source_file: str = typer.Argument(..., help="Path to the source file"),
):
    """
    Dump the token stream of a source file.
    """
    pipeline = GenericsPipeline(source_file)
    try:
        toks = pipeline.tokenize()
    except (PipelineError, FileNotFoundError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)
    for token in toks:
        console.print(f"{token.span!r:>8}  {token.type.name:<12} {escape(token.lexeme)}")

if __name__ == "__main__":
    app()
