"""Priority filter expressions.

Grammar:

    tree      = intersect (OR intersect)*
    intersect = predicate (AND predicate)*
    predicate = "(" tree ")" | [op] signed-integer
    op        = ">=" | ">" | "<=" | "<" | "==" | "="     (default "=")
    AND       = "&&" | "&" | "and"
    OR        = "||" | "|" | "or"

OR binds looser than AND.
"""

from dataclasses import dataclass
from enum import Enum

from .errors import FilterExpressionError
from .scanner import Scanner


class Comparison(Enum):
    GE = ">="
    GT = ">"
    LE = "<="
    LT = "<"
    EQ = "=="

    def test(self, priority: int, value: int) -> bool:
        match self:
            case Comparison.GE:
                return priority >= value
            case Comparison.GT:
                return priority > value
            case Comparison.LE:
                return priority <= value
            case Comparison.LT:
                return priority < value
            case Comparison.EQ:
                return priority == value


OPERATORS = {
    ">=": Comparison.GE,
    ">": Comparison.GT,
    "<=": Comparison.LE,
    "<": Comparison.LT,
    "==": Comparison.EQ,
    "=": Comparison.EQ,
}
AND_WORDS = ("&&", "&", "and")
OR_WORDS = ("||", "|", "or")


@dataclass(frozen=True)
class Leaf:
    op: Comparison
    value: int

    def matches(self, priority: int) -> bool:
        return self.op.test(priority, self.value)

    def __str__(self) -> str:
        return f"{self.op.value} {self.value}"


@dataclass(frozen=True)
class Union:
    left: "PriorityFilterTree"
    right: "PriorityFilterTree"

    def matches(self, priority: int) -> bool:
        return self.left.matches(priority) or self.right.matches(priority)

    def __str__(self) -> str:
        return f"{_child(self.left)} or {_child(self.right)}"


@dataclass(frozen=True)
class Intersection:
    left: "PriorityFilterTree"
    right: "PriorityFilterTree"

    def matches(self, priority: int) -> bool:
        return self.left.matches(priority) and self.right.matches(priority)

    def __str__(self) -> str:
        return f"{_child(self.left)} and {_child(self.right)}"


PriorityFilterTree = Leaf | Union | Intersection


def _child(node: PriorityFilterTree) -> str:
    if isinstance(node, Leaf):
        return str(node)
    return f"({node})"


# ============== Parser ==============


def _skip_whitespace(s: Scanner) -> None:
    while s.whitespace():
        pass


def _comparison(s: Scanner) -> Leaf | None:
    start = s.pos
    symbol = s.one_of(OPERATORS)
    _skip_whitespace(s)
    value = s.signed_decimal()
    if value is None:
        s.pos = start
        return None
    op = OPERATORS[symbol] if symbol else Comparison.EQ
    return Leaf(op, value)


def _predicate(s: Scanner) -> PriorityFilterTree | None:
    _skip_whitespace(s)
    start = s.pos
    if s.literal("("):
        tree = _tree(s)
        _skip_whitespace(s)
        if tree is not None and s.literal(")"):
            return tree
        s.pos = start
        return None
    return _comparison(s)


def _binary(s: Scanner, operand, words, node_type) -> PriorityFilterTree | None:
    left = operand(s)
    if left is None:
        return None
    while True:
        mark = s.pos
        _skip_whitespace(s)
        if s.one_of(words) is None:
            s.pos = mark
            return left
        right = operand(s)
        if right is None:
            s.pos = mark
            return left
        left = node_type(left, right)


def _intersect(s: Scanner) -> PriorityFilterTree | None:
    return _binary(s, _predicate, AND_WORDS, Intersection)


def _tree(s: Scanner) -> PriorityFilterTree | None:
    return _binary(s, _intersect, OR_WORDS, Union)


def parse_priority_filter(text: str) -> PriorityFilterTree:
    """Parse a priority filter such as `">= 5 and < 10"` or `"1 or (>= 10 and <= 20)"`."""
    s = Scanner(text)
    tree = _tree(s)
    _skip_whitespace(s)
    if tree is None or not s.at_end:
        raise FilterExpressionError(f"Invalid priority filter: {text!r}")
    return tree
