"""Classifier rule expressions.

Rulepack documents describe conditions as small JSON objects such as
``{"gt": ["mass_Me", 10]}`` or ``{"all": [...]}``. They are parsed once into
the immutable expression tree below and evaluated by
``starforge.engine.classification.evaluate_expr``.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class AllOf:
    items: tuple["Expr", ...]


@dataclass(frozen=True)
class AnyOf:
    items: tuple["Expr", ...]


@dataclass(frozen=True)
class Not:
    item: "Expr"


@dataclass(frozen=True)
class Gt:
    feature: str
    value: float


@dataclass(frozen=True)
class Lt:
    feature: str
    value: float


@dataclass(frozen=True)
class Between:
    feature: str
    low: float
    high: float


@dataclass(frozen=True)
class Eq:
    feature: str
    value: Any


@dataclass(frozen=True)
class HasTag:
    tag: str


Expr = Union[AllOf, AnyOf, Not, Gt, Lt, Between, Eq, HasTag]


def parse_expr(data: Any) -> Expr:
    """Parse a JSON rule condition into an expression tree.

    Args:
        data: Dict with exactly one operator key

    Returns:
        Parsed expression

    Raises:
        ValueError: If the operator is unknown or its operands are malformed
    """
    if isinstance(data, (AllOf, AnyOf, Not, Gt, Lt, Between, Eq, HasTag)):
        return data
    if not isinstance(data, dict) or len(data) != 1:
        raise ValueError(f"Rule expression must be an object with one operator: {data!r}")

    op, operand = next(iter(data.items()))
    if op in ("all", "any"):
        if not isinstance(operand, list):
            raise ValueError(f"'{op}' expects a list of expressions")
        items = tuple(parse_expr(item) for item in operand)
        return AllOf(items) if op == "all" else AnyOf(items)
    if op == "not":
        return Not(parse_expr(operand))
    if op in ("gt", "lt"):
        _check_operands(op, operand, 2)
        feature, value = operand
        return Gt(feature, float(value)) if op == "gt" else Lt(feature, float(value))
    if op == "between":
        _check_operands(op, operand, 3)
        feature, low, high = operand
        return Between(feature, float(low), float(high))
    if op == "eq":
        _check_operands(op, operand, 2)
        return Eq(operand[0], operand[1])
    if op == "hasTag":
        if not isinstance(operand, str):
            raise ValueError("'hasTag' expects a tag name")
        return HasTag(operand)
    raise ValueError(f"Unknown rule operator: {op}")


def _check_operands(op: str, operand: Any, count: int) -> None:
    if not isinstance(operand, list) or len(operand) != count:
        raise ValueError(f"'{op}' expects [feature, ...] with {count} items, got {operand!r}")
