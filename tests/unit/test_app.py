"""Unit tests for the command-line interface."""

import json
from decimal import Decimal

import pytest
from app import build_parser, main
from src.config.settings import reset_settings
from src.models.schema import BusinessRules


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


def run(capsys, *argv):
    code = main(list(argv))
    return code, capsys.readouterr()


class TestCommandLine:
    def test_valid_container(self, capsys):
        code, captured = run(capsys, "validate-container", "CSQU3054383")
        assert code == 0
        output = json.loads(captured.out)
        assert output == {"container_number": "CSQU3054383", "valid": True, "errors": []}

    def test_invalid_container(self, capsys):
        code, captured = run(capsys, "validate-container", "CSQU3054384")
        assert code == 1
        output = json.loads(captured.out)
        assert output["errors"][0]["code"] == "CHECK_DIGIT_ERROR"
        assert output["errors"][0]["details"]["expected"] == 3

    def test_per_diem(self, capsys):
        code, captured = run(capsys, "per-diem", "20", "25")
        assert code == 0
        assert json.loads(captured.out)["total"] == "725.00"

    def test_demurrage(self, capsys):
        code, captured = run(capsys, "demurrage", "40", "6")
        assert json.loads(captured.out)["components"] == {"DEMURRAGE": "700.00"}

    def test_detention(self, capsys):
        code, captured = run(capsys, "detention", "200")
        assert json.loads(captured.out)["total"] == "81.25"

    def test_detention_with_activity(self, capsys):
        code, captured = run(capsys, "detention", "105", "--activity", "DROP_HOOK")
        assert json.loads(captured.out)["total"] == "75.00"

    def test_rules_file(self, capsys, tmp_path):
        rules = BusinessRules.default().model_copy(update={
            "detention": BusinessRules.default().detention.model_copy(update={"rate_per_hour": Decimal("90.00")}),
        })
        path = tmp_path / "rules.json"
        path.write_text(rules.model_dump_json(), encoding="utf-8")
        code, captured = run(capsys, "--rules-file", str(path), "detention", "200")
        assert json.loads(captured.out)["total"] == "97.50"

    def test_broken_rules_file(self, capsys, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text("{", encoding="utf-8")
        code, captured = run(capsys, "--rules-file", str(path), "per-diem", "20", "8")
        assert code == 2
        assert "invalid" in captured.err

    def test_unknown_size_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["per-diem", "53", "8"])
