# Derive operations from quote and order line items.
# Version: 1.0.0
# Keyword heuristics turn free-text line items into ordered, timed operations.

from collections.abc import Iterable, Mapping
from typing import Any

from .constants import OperationRule, SchedulingConstants
from .models import LineItem, Operation


def derive_operations_from_line_items(
    line_items: Iterable[LineItem | Mapping[str, Any]],
    constants: SchedulingConstants | None = None,
    default_quantity: int = 1
) -> list[Operation]:
    """Convert line items into an ordered list of operations.

    Each line item description is matched case-insensitively against the
    configured keyword rules (machining, welding, assembly). Every matching
    rule adds one operation, so "machining and welding" yields two. A line
    item matching no rule becomes a generic production step. A final
    inspection operation is always appended.

    Hours scale with quantity and are floored at each rule's minimum, e.g.
    10 units of machining at 0.17 h/unit is 1.7 h.

    Args:
        line_items: LineItem objects or quote/order rows with description and quantity.
        constants: Scheduling constants with the rules (defaults if None).
        default_quantity: Quantity used when a row has none.

    Returns:
        Operations numbered 1..n in derivation order.
    """
    constants = constants or SchedulingConstants()
    operations: list[Operation] = []
    operation_number = 1

    for raw in line_items:
        item = raw if isinstance(raw, LineItem) else LineItem.from_mapping(raw, default_quantity)
        description = item.description.lower()

        matched = [rule for rule in constants.operation_rules if rule.keyword and rule.keyword in description]
        if not matched:
            matched = [constants.default_operation]

        for rule in matched:
            operations.append(_operation_from_rule(rule, item, operation_number))
            operation_number += 1

    final = constants.final_operation
    operations.append(Operation(
        name=final.name,
        operation_number=operation_number,
        estimated_hours=final.hours,
        work_center_id=final.work_center_id,
    ))

    return operations


def _operation_from_rule(rule: OperationRule, item: LineItem, operation_number: int) -> Operation:
    return Operation(
        name=f"{rule.label} - {item.description}",
        operation_number=operation_number,
        estimated_hours=rule.estimate_hours(item.quantity),
        work_center_id=rule.work_center_id,
        required_skills=rule.required_skills,
    )
