"""Integration tests: Sheet data entry driving evaluation and recalculation."""

from __future__ import annotations

import logging

import pytest

from sheetcalc import EMPTY, CalcOptions, Grid, Integer, Real, Sheet, Text
from sheetcalc.calc import DependencyGraph, RecalcEngine

A1, B1, C1 = (0, 0), (0, 1), (0, 2)
A2, B2, C2 = (1, 0), (1, 1), (1, 2)
A3, B3, C3 = (2, 0), (2, 1), (2, 2)


# ---------------------------------------------------------------------------
# Sheet builders
# ---------------------------------------------------------------------------


def _build_sum_chain() -> Sheet:
    """A1=10, A2=20, A3=SUM(A1..A2), B3=A3*2."""
    sheet = Sheet()
    sheet["A1"] = "10"
    sheet["A2"] = "20"
    sheet["A3"] = "=SUM(A1..A2)"
    sheet["B3"] = "=A3*2"
    return sheet


def _build_cycle() -> Sheet:
    """A1 and B1 read each other once B1 is entered."""
    sheet = Sheet()
    sheet["C1"] = "1"
    sheet["A1"] = "=B1+C1"
    sheet["B1"] = "=A1+1"
    return sheet


class TestDataEntry:
    def test_integer(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "42"
        assert sheet["A1"] == Integer(42)

    def test_real(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "2.5"
        assert sheet["A1"] == Real(2.5)

    def test_text(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "Revenue"
        assert sheet["A1"] == Text("Revenue")

    def test_empty(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "5"
        sheet["A1"] = ""
        assert sheet["A1"] == EMPTY

    def test_new_cells_empty(self) -> None:
        assert Sheet()["C3"] == EMPTY

    def test_formula_value_and_dependencies(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "10"
        sheet["B1"] = "5"
        sheet["C1"] = "=A1+B1"
        assert sheet["C1"] == Real(15.0)
        assert sheet.formula(*C1) == "=A1+B1"
        assert sheet.dependencies(*C1) == frozenset({A1, B1})
        assert sheet.dependency_labels(*C1) == ["A1", "B1"]

    def test_unknown_label(self) -> None:
        with pytest.raises(KeyError):
            Sheet()["D1"] = "1"

    def test_out_of_bounds(self) -> None:
        with pytest.raises(IndexError):
            Sheet().enter(5, 0, "1")

    def test_value_replaces_formula(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "1"
        sheet["B1"] = "=A1"
        sheet["B1"] = "7"
        assert sheet.formula(*B1) is None
        sheet["A1"] = "100"
        assert sheet["B1"] == Integer(7)

    def test_set_value(self) -> None:
        sheet = Sheet()
        sheet["B1"] = "=A1*3"
        result = sheet.set_value(0, 0, Real(1.5))
        assert sheet["B1"] == Real(4.5)
        assert result.recalculated == 1


class TestFailedFormula:
    def test_trailing_operator_keeps_previous_value(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "3"
        sheet["B1"] = "9"
        result = sheet.enter(*B1, "=A1+")
        assert sheet["B1"] == Integer(9)
        assert not result.ok
        assert B1 in result.errors
        assert sheet.inert_formula(*B1) == "=A1+"
        assert sheet.formula(*B1) is None

    def test_failed_formula_does_not_propagate(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "3"
        sheet["B1"] = "=A1"
        sheet["B1"] = "=nonsense"
        # B1 kept 3.0 and is no longer a live formula
        sheet["A1"] = "50"
        assert sheet["B1"] == Real(3.0)
        assert sheet.dependencies(*B1) == frozenset()

    def test_replacing_inert_formula(self) -> None:
        sheet = Sheet()
        sheet["B1"] = "=A1+"
        sheet["B1"] = "=A1+2"
        assert sheet.inert_formula(*B1) is None
        assert sheet["B1"] == Real(2.0)

    def test_error_kinds_are_reported(self) -> None:
        sheet = Sheet()
        result = sheet.enter(*A1, "=SUM(A2..Z99)")
        assert "Z99" in result.errors[A1]


class TestRecalculation:
    def test_change_reaches_dependent(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "10"
        sheet["B1"] = "5"
        sheet["C1"] = "=A1+B1"
        result = sheet.enter(*A1, "20")
        assert sheet["C1"] == Real(25.0)
        assert result.changed() == {C1: Real(25.0)}
        delta = result.deltas[0]
        assert delta.label == "C1"
        assert delta.old_value == Real(15.0)
        assert delta.formula == "=A1+B1"

    def test_transitive(self) -> None:
        sheet = _build_sum_chain()
        assert sheet["A3"] == Real(30.0)
        assert sheet["B3"] == Real(60.0)
        sheet["A1"] = "15"
        assert sheet["A3"] == Real(35.0)
        assert sheet["B3"] == Real(70.0)

    def test_range_member_change(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "label"
        sheet["B1"] = "1"
        sheet["A2"] = "2"
        sheet["B2"] = "3"
        sheet["C3"] = "=SUM(A1..B2)"
        assert sheet["C3"] == Real(6.0)
        assert len(sheet.dependencies(*C3)) == 4
        sheet["A1"] = "4"
        assert sheet["C3"] == Real(10.0)

    def test_unrelated_change_no_recalc(self) -> None:
        sheet = _build_sum_chain()
        result = sheet.enter(*C2, "999")
        assert result.deltas == ()
        assert sheet["A3"] == Real(30.0)

    def test_dependencies_replaced_not_merged(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "1"
        sheet["A2"] = "2"
        sheet["B1"] = "=A1"
        sheet["B1"] = "=A2"
        assert sheet.dependencies(*B1) == frozenset({A2})
        result = sheet.enter(*A1, "100")
        assert result.deltas == ()
        assert sheet["B1"] == Real(2.0)

    def test_dependencies_refreshed_on_recalc(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "1"
        sheet["B1"] = "=A1*2"
        sheet.graph.record(B1, "=A1*2", {A1, C3})  # stale extra entry
        sheet["A1"] = "3"
        assert sheet.dependencies(*B1) == frozenset({A1})

    def test_diamond(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "1"
        sheet["B1"] = "=A1+1"
        sheet["A2"] = "=A1*10"
        sheet["B2"] = "=B1+A2"
        sheet["A1"] = "2"
        assert sheet["B1"] == Real(3.0)
        assert sheet["A2"] == Real(20.0)
        assert sheet["B2"] == Real(23.0)

    def test_diamond_reports_each_cell_once(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "1"
        sheet["B1"] = "=A1+1"
        sheet["A2"] = "=A1*10"
        sheet["B2"] = "=B1+A2"
        result = sheet.enter(*A1, "2")
        assert result.recalculated == 3
        assert [d.label for d in result.deltas] == ["B1", "B2", "A2"]
        b2 = result.deltas[1]
        assert b2.old_value == Real(12.0)
        assert b2.new_value == Real(23.0)

    def test_running_sum_column_is_polynomial(
        self, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        rows = 20
        sheet = Sheet(rows=rows, cols=1)
        sheet["A1"] = "1"
        for k in range(2, rows + 1):
            sheet[f"A{k}"] = f"=SUM(A1..A{k - 1})"
        assert sheet[f"A{rows}"] == Real(2.0 ** (rows - 2))

        calls = 0
        evaluate = sheet.evaluator.evaluate

        def counting(*args: object):
            nonlocal calls
            calls += 1
            return evaluate(*args)

        monkeypatch.setattr(sheet.evaluator, "evaluate", counting)
        result = sheet.enter(0, 0, "2")

        # each formula cell re-reads once per changed cell above it
        assert calls == rows * (rows - 1) // 2
        assert result.recalculated == rows - 1
        assert len({d.coord for d in result.deltas}) == rows - 1
        assert sheet[f"A{rows}"] == Real(2.0 ** (rows - 1))

    def test_unchanged_value_stops_propagation(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "3"
        sheet["B1"] = "=A1*0"
        sheet["C1"] = "=B1+1"
        result = sheet.enter(*A1, "8")
        assert result.deltas == ()
        assert result.ok
        assert sheet["C1"] == Real(1.0)

    def test_tolerance(self) -> None:
        grid = Grid(3, 3)
        grid.set_cell(*A1, Real(1.0))
        engine = RecalcEngine(tolerance=0.5)
        evaluation = engine.evaluator.evaluate("=A1", B1, grid)
        grid.set_cell(*B1, Real(evaluation.value))
        DependencyGraph(grid).record(B1, "=A1", evaluation.dependencies)

        grid.set_cell(*A1, Real(1.25))
        result = engine.on_mutation(A1, grid)
        assert result.deltas == ()
        assert grid.get_cell(*B1) == Real(1.25)

    def test_reach_logged_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        sheet = Sheet()
        sheet["A1"] = "1"
        sheet["B1"] = "=A1+1"
        sheet["A2"] = "=A1*10"
        sheet["B2"] = "=B1+A2"
        with caplog.at_level(logging.DEBUG, logger="sheetcalc.calc._engine"):
            sheet["A1"] = "2"
        assert "Change at A1 reaches 3 formula cells (depth 2)" in caplog.text

    def test_failure_during_propagation_keeps_value(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        sheet = Sheet(options=CalcOptions(zero_divisor="raise"))
        sheet["A1"] = "2"
        sheet["B1"] = "=10/A1"
        sheet["C1"] = "=A1+1"
        with caplog.at_level(logging.WARNING, logger="sheetcalc.calc._engine"):
            result = sheet.enter(*A1, "0")
        assert sheet["B1"] == Real(5.0)
        assert sheet["C1"] == Real(1.0)  # sibling still propagated
        assert B1 in result.errors
        assert "Error recalculating B1" in caplog.text
        # the formula is still live and recovers once the input is valid
        sheet["A1"] = "4"
        assert sheet["B1"] == Real(2.5)


class TestCycles:
    def test_cycle_terminates(self) -> None:
        sheet = _build_cycle()
        # B1 entered last: B1 = A1+1 = 2, then A1 = B1+C1 = 3 is recalculated once
        assert sheet["B1"] == Real(2.0)
        assert sheet["A1"] == Real(3.0)

    def test_mutation_into_cycle_terminates(self) -> None:
        sheet = _build_cycle()
        result = sheet.enter(*C1, "5")
        assert result.ok
        assert sheet["A1"] == Real(7.0)
        assert sheet["B1"] == Real(8.0)

    def test_self_reference(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "=A1+1"
        assert sheet["A1"] == Real(1.0)
        result = sheet.enter(*B1, "3")
        assert result.deltas == ()
        assert sheet["A1"] == Real(1.0)


class TestGrowAndLoad:
    def test_grow_enables_new_labels(self) -> None:
        sheet = Sheet()
        sheet.grow(5, 5)
        sheet["E5"] = "3"
        sheet["A1"] = "=E5*2"
        assert sheet["A1"] == Real(6.0)

    def test_grow_limits(self) -> None:
        sheet = Sheet(max_rows=4, max_cols=4)
        with pytest.raises(ValueError, match="exceeds limit"):
            sheet.grow(5, 4)

    def test_load_rows(self) -> None:
        sheet = Sheet()
        failures = sheet.load_rows([
            ["Item", "Qty", "Price", "Total"],
            ["Widget", 2, 2.5, "=B2*C2"],
            ["Gadget", "3", "4", "=B3*C3"],
            [None, None, "Sum", "=SUM(D2..D3)"],
        ])
        assert failures == []
        assert sheet.grid.row_count() == 4
        assert sheet.grid.col_count() == 4
        assert sheet["B2"] == Integer(2)
        assert sheet["C2"] == Real(2.5)
        assert sheet["D4"] == Real(17.0)
        sheet["B2"] = "4"
        assert sheet["D2"] == Real(10.0)
        assert sheet["D4"] == Real(22.0)

    def test_load_rows_reports_failures(self) -> None:
        sheet = Sheet()
        failures = sheet.load_rows([["1", "=A1*"]])
        assert len(failures) == 1
        assert B1 in failures[0].errors


class TestEngineDirect:
    """RecalcEngine against a bare Grid, without the Sheet facade."""

    def test_on_mutation(self) -> None:
        grid = Grid(3, 3)
        grid.set_cell(*A1, Integer(10))
        grid.set_cell(*B1, Integer(5))
        engine = RecalcEngine()
        evaluation = engine.evaluator.evaluate("=A1+B1", C1, grid)
        grid.set_cell(*C1, Real(evaluation.value))
        DependencyGraph(grid).record(C1, "=A1+B1", evaluation.dependencies)

        grid.set_cell(*A1, Integer(20))
        result = engine.on_mutation(A1, grid)
        assert grid.get_cell(*C1) == Real(25.0)
        assert result.origin == A1
        assert result.recalculated == 1

    def test_no_dependents(self) -> None:
        result = RecalcEngine().on_mutation(B2, Grid(3, 3))
        assert result.ok
        assert result.deltas == ()
