"""Tests for deriving operations from quote/order line items."""

from __future__ import annotations

import pytest

from production_scheduler.constants import OperationRule, SchedulingConstants
from production_scheduler.models import LineItem
from production_scheduler.operations import derive_operations_from_line_items


def test_machining_and_assembly_with_trailing_inspection():
    ops = derive_operations_from_line_items(
        [LineItem("CNC machining of bracket", 10), LineItem("Manual assembly", 10)]
    )

    assert [op.operation_number for op in ops] == [1, 2, 3]
    assert ops[0].name == "CNC Machining - CNC machining of bracket"
    assert ops[0].estimated_hours == pytest.approx(1.7)
    assert ops[0].work_center_id == "wc-1"
    assert ops[1].name == "Assembly - Manual assembly"
    assert ops[1].estimated_hours == pytest.approx(1.3)
    assert ops[2].name == "Quality Control & Inspection"
    assert ops[2].estimated_hours == 1
    assert ops[2].work_center_id == "wc-4"


def test_rows_as_mappings_use_default_quantity():
    ops = derive_operations_from_line_items(
        [{"description": "CNC MACHINING", "quantity": None}, {"description": "Welding frame"}],
        default_quantity=10,
    )
    assert ops[0].estimated_hours == pytest.approx(1.7)
    assert ops[1].name == "Welding - Welding frame"
    assert ops[1].estimated_hours == pytest.approx(0.8)


def test_minimum_hours_apply_to_small_quantities():
    ops = derive_operations_from_line_items(
        [LineItem("machining", 1), LineItem("welding", 1), LineItem("assembly", 1), LineItem("paint", 1)]
    )
    assert [op.estimated_hours for op in ops] == [1.0, 0.5, 0.75, 0.5, 1.0]


def test_unmatched_item_becomes_generic_production_step():
    ops = derive_operations_from_line_items([LineItem("Powder coat panels", 25)])

    assert len(ops) == 2
    assert ops[0].name == "Production - Powder coat panels"
    assert ops[0].estimated_hours == pytest.approx(2.0)
    assert ops[0].required_skills == ("general",)
    assert ops[0].work_center_id is None


def test_generic_step_is_per_item():
    # An unmatched item after a matched one still gets its own step
    ops = derive_operations_from_line_items([LineItem("machining", 10), LineItem("deburr", 10)])
    assert [op.name.split(" - ")[0] for op in ops] == ["CNC Machining", "Production", "Quality Control & Inspection"]


def test_item_matching_several_keywords_yields_several_operations():
    ops = derive_operations_from_line_items([LineItem("Welding and assembly of frame", 10)])
    assert [op.name.split(" - ")[0] for op in ops] == ["Welding", "Assembly", "Quality Control & Inspection"]
    assert [op.operation_number for op in ops] == [1, 2, 3]


def test_no_line_items_still_inspects():
    ops = derive_operations_from_line_items([])
    assert len(ops) == 1
    assert ops[0].operation_number == 1
    assert ops[0].name == "Quality Control & Inspection"


def test_rules_come_from_constants():
    constants = SchedulingConstants(
        operation_rules=(OperationRule("laser", "Laser Cutting", 0.05, 0.25, "wc-9"),)
    )
    ops = derive_operations_from_line_items([LineItem("Laser cut blanks", 100)], constants)
    assert ops[0].name == "Laser Cutting - Laser cut blanks"
    assert ops[0].estimated_hours == pytest.approx(5.0)
    assert ops[0].work_center_id == "wc-9"
