import json

import pytest
from typer.testing import CliRunner

from genclause.diagnostics import DiagnosticEngine
from genclause.main import app
from genclause.pipeline import GenericsPipeline, PipelineError

SOURCE = "<'a, T: Clone = u8> where T: Copy"

def test_pipeline_views(tmp_path):
    path = tmp_path / "clause.rs"
    path.write_text(SOURCE)

    pipeline = GenericsPipeline(str(path), diagnostics=DiagnosticEngine(echo=False))
    generics = pipeline.run()

    assert len(generics.where_clause.predicates) == 1
    assert pipeline.artifacts["views"] == {
        "declaration": "<'a, T: Clone = u8>",
        "impl": "<'a, T: Clone>",
        "type": "<'a, T>",
        "turbofish": "::<'a, T>",
        "where": "where T: Copy",
    }

def test_pipeline_json_export(tmp_path):
    path = tmp_path / "clause.rs"
    path.write_text(SOURCE)

    pipeline = GenericsPipeline(str(path), export_json=True, diagnostics=DiagnosticEngine(echo=False))
    pipeline.run()

    data = json.loads((tmp_path / "clause.json").read_text())
    assert data["filename"] == "clause.rs"
    assert data["views"]["type"] == "<'a, T>"
    assert data["tokens"][0]["type"] == "LT"
    assert data["tokens"][-1]["type"] == "EOF"

def test_pipeline_parse_failure(tmp_path):
    path = tmp_path / "bad.rs"
    path.write_text("<T:>")
    diag = DiagnosticEngine(echo=False)

    with pytest.raises(PipelineError):
        GenericsPipeline(str(path), diagnostics=diag).run()
    assert diag.has_errors

def test_pipeline_shares_engine_across_runs(tmp_path):
    bad = tmp_path / "bad.rs"
    bad.write_text("<T:>")
    good = tmp_path / "clause.rs"
    good.write_text(SOURCE)
    diag = DiagnosticEngine(echo=False)

    with pytest.raises(PipelineError):
        GenericsPipeline(str(bad), diagnostics=diag).run()

    pipeline = GenericsPipeline(str(good), diagnostics=diag)
    pipeline.run()
    assert pipeline.artifacts["views"]["impl"] == "<'a, T: Clone>"

def test_pipeline_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        GenericsPipeline(str(tmp_path / "missing.rs")).run()

def test_cli_views(tmp_path):
    path = tmp_path / "clause.rs"
    path.write_text(SOURCE)

    result = CliRunner().invoke(app, ["views", str(path)])

    assert result.exit_code == 0
    assert "::<'a, T>" in result.stdout

def test_cli_tokens(tmp_path):
    path = tmp_path / "clause.rs"
    path.write_text("<T>")

    result = CliRunner().invoke(app, ["tokens", str(path)])

    assert result.exit_code == 0
    assert "IDENTIFIER" in result.stdout

def test_cli_reports_errors(tmp_path):
    path = tmp_path / "bad.rs"
    path.write_text("<'a 'b>")

    result = CliRunner().invoke(app, ["views", str(path)])

    assert result.exit_code == 1
