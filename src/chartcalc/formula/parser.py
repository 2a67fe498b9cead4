"""Formula parser for ChartCalc.

Parses formula strings into an AST using Lark parser. Token kinds are
decided here, once, and carried on the AST.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from lark import Lark, Transformer, v_args
from lark.exceptions import LarkError, VisitError

from chartcalc.core.exceptions import FormulaSyntaxError
from chartcalc.formula.grammar import FORMULA_GRAMMAR
from chartcalc.formula.tokens import FormulaToken, classify_token


# AST Node types
@dataclass(frozen=True)
class NumberNode:
    value: float


@dataclass(frozen=True)
class StringNode:
    value: str


@dataclass(frozen=True)
class TokenNode:
    token: FormulaToken


@dataclass(frozen=True)
class FunctionCallNode:
    name: str
    arguments: tuple[Any, ...]


@dataclass(frozen=True)
class BinaryOpNode:
    operator: str
    left: Any
    right: Any


@dataclass(frozen=True)
class UnaryOpNode:
    operator: str
    operand: Any


_ESCAPE = re.compile(r"\\(.)")


class FormulaTransformer(Transformer):
    """Transform Lark parse tree into AST nodes."""

    @v_args(inline=True)
    def number(self, token):
        return NumberNode(float(token))

    @v_args(inline=True)
    def string(self, token):
        # Remove quotes and unescape
        return StringNode(_ESCAPE.sub(r"\1", str(token)[1:-1]))

    @v_args(inline=True)
    def token(self, token):
        body = str(token)[1:-1]
        classified = classify_token(body)
        if classified is None:
            raise ValueError(f"Unrecognised token [{body}]")
        return TokenNode(classified)

    def function_call(self, items):
        name = str(items[0])
        args = tuple(items[1]) if len(items) > 1 and items[1] else ()
        return FunctionCallNode(name, args)

    def arguments(self, items):
        return list(items)

    # Binary operators
    @v_args(inline=True)
    def add(self, left, right):
        return BinaryOpNode("+", left, right)

    @v_args(inline=True)
    def sub(self, left, right):
        return BinaryOpNode("-", left, right)

    @v_args(inline=True)
    def mul(self, left, right):
        return BinaryOpNode("*", left, right)

    @v_args(inline=True)
    def div(self, left, right):
        return BinaryOpNode("/", left, right)

    # Unary operators
    @v_args(inline=True)
    def neg(self, operand):
        return UnaryOpNode("-", operand)


class FormulaParser:
    """
    Parser for chart formulas.

    Parses formula strings into an AST that can be evaluated. Formulas
    are immutable strings, so parsed trees are memoised per formula.
    """

    def __init__(self, cache_size: int = 1024):
        self._parser = Lark(
            FORMULA_GRAMMAR,
            parser="lalr",
            transformer=FormulaTransformer(),
        )
        self._parse_cached = lru_cache(maxsize=cache_size)(self._parse)

    def _parse(self, formula: str) -> Any:
        try:
            return self._parser.parse(formula)
        except VisitError as e:
            raise FormulaSyntaxError(formula, str(e.orig_exc)) from e
        except (LarkError, ValueError) as e:
            raise FormulaSyntaxError(formula, str(e)) from e

    def parse(self, formula: str) -> Any:
        """
        Parse a formula string into an AST.

        Args:
            formula: Formula string to parse

        Returns:
            AST root node

        Raises:
            FormulaSyntaxError: If formula syntax is invalid
        """
        if not isinstance(formula, str) or not formula.strip():
            raise FormulaSyntaxError(str(formula), "formula is empty")
        return self._parse_cached(formula)

    def validate(self, formula: str) -> tuple[bool, str | None]:
        """
        Validate formula syntax.

        Args:
            formula: Formula string to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            self.parse(formula)
            return True, None
        except FormulaSyntaxError as e:
            return False, e.message

    def get_tokens(self, formula: str) -> list[FormulaToken]:
        """
        Extract the tokens referenced by a formula, in first-seen order.

        Args:
            formula: Formula string

        Returns:
            Distinct tokens used in the formula
        """
        ast = self.parse(formula)
        tokens: list[FormulaToken] = []
        # Explicit stack, left to right: long sums nest as deep as they are long
        stack = [ast]
        while stack:
            node = stack.pop()
            if isinstance(node, TokenNode):
                tokens.append(node.token)
            elif isinstance(node, BinaryOpNode):
                stack.extend((node.right, node.left))
            elif isinstance(node, UnaryOpNode):
                stack.append(node.operand)
            elif isinstance(node, FunctionCallNode):
                stack.extend(reversed(node.arguments))
        return list(dict.fromkeys(tokens))


_parser: FormulaParser | None = None


def get_parser() -> FormulaParser:
    """Return the shared parser; building the LALR tables is not free."""
    global _parser
    if _parser is None:
        _parser = FormulaParser()
    return _parser
