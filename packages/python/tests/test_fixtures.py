"""Tests that run the JSON review fixtures."""

import json
from pathlib import Path
from typing import Any

import pytest

import sqlreview
from sqlreview import Rule

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_test_cases() -> list[tuple[str, dict[str, Any], dict[str, Any]]]:
    """Load every fixture case with the rule it runs under."""
    cases: list[tuple[str, dict[str, Any], dict[str, Any]]] = []

    for file in sorted(FIXTURES_DIR.glob("*.json")):
        data = json.loads(file.read_text())
        fixture_name = data.get("name", file.stem)
        for test in data["tests"]:
            test_name = test.get("description", test["sql"][:50])
            rule = test.get("rule", data.get("rule"))
            cases.append((f"{fixture_name}: {test_name}", rule, test))

    return cases


def build_rule(rule: dict[str, Any]) -> Rule:
    return Rule(
        type=rule["type"],
        dialect=rule["engine"],
        level=rule.get("level", "WARNING"),
        payload=rule.get("payload"),
    )


test_cases = load_test_cases()


@pytest.mark.parametrize("name,rule,test_case", test_cases)
def test_fixture(name: str, rule: dict[str, Any], test_case: dict[str, Any]) -> None:
    """Run a fixture case and compare every advice field it names."""
    result = sqlreview.review(test_case["sql"], [build_rule(rule)])
    want = test_case["want"]

    assert len(result.advice) == len(want), (
        f"{name}: expected {len(want)} advice, got {result.advice}"
    )
    for got, expected in zip(result.advice, want):
        assert got.status.value == expected["status"], f"{name}: status {got}"
        assert got.code == expected["code"], f"{name}: code {got}"
        assert got.title == expected["title"], f"{name}: title {got}"
        if "content" in expected:
            assert got.content == expected["content"], f"{name}: content {got}"
        assert got.line == expected["line"], f"{name}: line {got}"
