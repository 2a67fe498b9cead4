"""Lark grammar definition for chart formulas.

This grammar supports the report formula syntax:
- Arithmetic: +, -, *, / with unary minus and parentheses
- Bracketed tokens: [field], [stats.field], [PARAM:key], [MANUAL:key],
  [MEDIA:slug], [TEXT:slug]
- Function calls: MAX(a, b, ...), MIN(...), ROUND(x), ABS(x)
- Literals: numbers, and double-quoted strings (produced when asset
  tokens are substituted)
"""

# Lark grammar for formula parsing
FORMULA_GRAMMAR = r"""
    ?start: expression

    ?expression: additive

    ?additive: multiplicative
        | additive "+" multiplicative -> add
        | additive "-" multiplicative -> sub

    ?multiplicative: unary
        | multiplicative "*" unary -> mul
        | multiplicative "/" unary -> div

    ?unary: atom
        | "-" unary -> neg

    ?atom: NUMBER -> number
        | STRING -> string
        | TOKEN -> token
        | function_call
        | "(" expression ")"

    function_call: FUNCTION_NAME "(" [arguments] ")"

    arguments: expression ("," expression)*

    // Whole bracketed token; the body is classified by the transformer
    TOKEN: /\[[A-Za-z0-9_:.\-]+\]/

    // Function names are upper-case identifiers
    FUNCTION_NAME: /[A-Z][A-Z0-9_]*/

    // Double-quoted string with backslash escapes
    STRING: /"(?:[^"\\]|\\.)*"/

    // Number literals (integer or decimal, with optional scientific notation)
    // Note: negative sign is handled by unary operator, not here
    NUMBER: /(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?/

    // Whitespace handling
    %import common.WS
    %ignore WS
"""
