"""Formula evaluator for ChartCalc.

Evaluates parsed formula ASTs by walking the tree. Nothing here executes
code: the only operations are the four arithmetic operators, unary minus
and the registered math functions.

The evaluator boundary never raises. Division by zero, non-finite
results, strings in arithmetic, unknown functions and unparseable input
all collapse to the NA sentinel.
"""

import math
import re
from typing import Any

from chartcalc.core.exceptions import FormulaSyntaxError
from chartcalc.core.logging import get_logger
from chartcalc.formula.functions import FORMULA_FUNCTIONS
from chartcalc.formula.parser import (
    BinaryOpNode,
    FunctionCallNode,
    NumberNode,
    StringNode,
    TokenNode,
    UnaryOpNode,
    get_parser,
)
from chartcalc.formula.resolver import TokenResolver
from chartcalc.formula.results import NA, FormulaResult, is_number

logger = get_logger(__name__)

# "/0" not followed by a digit or decimal point: "/0", "/ 0)" but not "/0.5" or "/01"
LITERAL_ZERO_DIVISION = re.compile(r"/\s*0(?![\d.])")


class FormulaEvaluator:
    """
    Evaluates formula ASTs against resolved token values.

    Supports +, -, *, /, unary minus and the registered functions.
    """

    def __init__(self, resolver: TokenResolver | None = None):
        """
        Initialize evaluator.

        Args:
            resolver: Token resolver for the evaluation's data sources;
                without one, every field resolves to 0
        """
        self._resolver = resolver or TokenResolver()

    def evaluate(self, ast: Any) -> FormulaResult:
        """
        Evaluate an AST.

        Args:
            ast: AST root node

        Returns:
            A finite float, a string (lone string operand), or NA
        """
        try:
            result = self._eval(ast)
        except Exception as e:
            logger.warning(f"Formula evaluation error: {e}")
            return NA
        return _finalize(result)

    def _eval(self, root: Any) -> FormulaResult:
        """
        Evaluate a tree bottom-up with an explicit stack.

        Long sums parse into left-nested chains as deep as the formula is
        long, so the walk must not recurse.
        """
        values: list[FormulaResult] = []
        stack: list[tuple[Any, bool]] = [(root, False)]

        while stack:
            node, children_done = stack.pop()

            if isinstance(node, (NumberNode, StringNode)):
                values.append(node.value)
                continue

            if isinstance(node, TokenNode):
                values.append(self._resolver.resolve(node.token))
                continue

            children = _children(node)
            if not children_done:
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(children))
                continue

            split = len(values) - len(children)
            args = values[split:]
            del values[split:]
            values.append(self._apply(node, args))

        return values[-1]

    def _apply(self, node: Any, args: list[FormulaResult]) -> FormulaResult:
        """Combine the evaluated children of an interior node."""
        if isinstance(node, FunctionCallNode):
            return self._eval_function(node, args)

        if isinstance(node, BinaryOpNode):
            return self._eval_binary(node.operator, *args)

        return self._eval_unary(node.operator, *args)

    def _eval_function(self, node: FunctionCallNode, args: list[FormulaResult]) -> FormulaResult:
        """Evaluate a function call."""
        func = FORMULA_FUNCTIONS.get(node.name)
        if func is None:
            logger.debug(f"Unknown function: {node.name}")
            return NA

        try:
            return func(*args)
        except TypeError as e:
            # Wrong arity, e.g. ROUND(1, 2)
            logger.debug(f"Bad call to {node.name}: {e}")
            return NA

    def _eval_binary(self, op: str, left: FormulaResult, right: FormulaResult) -> FormulaResult:
        """Evaluate a binary operation."""
        if not (is_number(left) and is_number(right)):
            return NA

        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if op == "/":
            if right == 0:
                return NA
            return left / right

        raise ValueError(f"Unknown operator: {op}")

    def _eval_unary(self, op: str, operand: FormulaResult) -> FormulaResult:
        """Evaluate a unary operation."""
        if op == "-" and is_number(operand):
            return -operand
        return NA


def _children(node: Any) -> tuple[Any, ...]:
    if isinstance(node, FunctionCallNode):
        return node.arguments
    if isinstance(node, BinaryOpNode):
        return (node.left, node.right)
    if isinstance(node, UnaryOpNode):
        return (node.operand,)
    raise ValueError(f"Unknown node type: {type(node).__name__}")


def _finalize(result: Any) -> FormulaResult:
    """Numbers must be finite; strings pass through; anything else is NA."""
    if is_number(result):
        # + 0.0 turns -0.0 into 0.0
        return float(result) + 0.0 if math.isfinite(result) else NA
    if isinstance(result, str):
        return result
    return NA


def _is_arithmetic(root: Any) -> bool:
    """True if the tree holds only numbers, + - * / and unary minus."""
    stack = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, NumberNode):
            continue
        if isinstance(node, BinaryOpNode):
            stack.extend((node.left, node.right))
        elif isinstance(node, UnaryOpNode):
            stack.append(node.operand)
        else:
            return False
    return True


def evaluate_expression(expression: str) -> FormulaResult:
    """
    Evaluate a fully substituted arithmetic expression.

    Only numeric literals, unary minus, + - * / and parentheses are
    accepted; tokens, function calls and strings make the result NA.

    Args:
        expression: Expression such as "(120+160)/45"

    Returns:
        Finite float, or NA
    """
    if LITERAL_ZERO_DIVISION.search(expression or ""):
        return NA

    try:
        ast = get_parser().parse(expression)
    except FormulaSyntaxError as e:
        logger.debug(e.reason, extra={"formula": expression})
        return NA

    if not _is_arithmetic(ast):
        return NA

    result = FormulaEvaluator().evaluate(ast)
    return result if is_number(result) else NA
