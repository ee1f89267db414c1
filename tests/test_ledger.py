from __future__ import annotations

import allure
import pytest

from site_builder.tasks.ledger import JsonCommandLedger

pytestmark = [
    allure.epic("Task Engine"),
    allure.feature("Command Ledger"),
]


@pytest.fixture()
def ledger() -> JsonCommandLedger:
    return JsonCommandLedger({"hero": {"convert a b": "H1"}})


def test_missing_entry_needs_run(ledger: JsonCommandLedger) -> None:
    assert ledger.needs_run("hero", "convert c d", "H1", output_exists=True)
    assert ledger.needs_run("logo", "convert a b", "H1", output_exists=True)


def test_unchanged_fingerprint_with_output_is_skipped(ledger: JsonCommandLedger) -> None:
    assert not ledger.needs_run("hero", "convert a b", "H1", output_exists=True)


@pytest.mark.parametrize("output_exists", [True, False])
def test_changed_fingerprint_needs_run_regardless_of_output(
    ledger: JsonCommandLedger,
    output_exists: bool,
) -> None:
    assert ledger.needs_run("hero", "convert a b", "H2", output_exists=output_exists)


def test_missing_output_needs_run(ledger: JsonCommandLedger) -> None:
    assert ledger.needs_run("hero", "convert a b", "H1", output_exists=False)


def test_force_needs_run_unconditionally(ledger: JsonCommandLedger) -> None:
    assert ledger.needs_run("hero", "convert a b", "H1", output_exists=True, force=True)


def test_record_overwrites_fingerprint(ledger: JsonCommandLedger) -> None:
    ledger.record("hero", "convert a b", "H2")
    ledger.record("logo", "convert x y", "L1")

    assert ledger.to_mapping() == {
        "hero": {"convert a b": "H2"},
        "logo": {"convert x y": "L1"},
    }
    assert len(ledger) == 2


def test_from_mapping_ignores_malformed_rows() -> None:
    ledger = JsonCommandLedger.from_mapping(
        {"hero": {"cmd": "H1", "bad": 3}, "logo": "not-a-mapping"},
    )

    assert ledger.to_mapping() == {"hero": {"cmd": "H1"}}
    assert JsonCommandLedger.from_mapping(["not", "a", "dict"]).to_mapping() == {}
