"""
Integer input parsing for the command line.

parse_int() takes a key or level as typed by the user: a literal
(1_000_000, 0xFF, 0b1010, 123 456 789, 1,000) or an integer expression
such as 2**61-1, 20!, 3*1e6 or (1<<40)+15. Expressions are evaluated over
the AST with a fixed set of integer operators; anything else raises
UserInputError.
"""

from __future__ import annotations

import ast
import math
import operator as op
import re

from divgrid.utility import UserInputError, guard_digits, max_digits

# a thousands separator (space, comma, dot, NBSP, thin or narrow NBSP) used consistently
_GROUPED = re.compile(r"[+-]?\d{1,3}([ ,.\u00a0\u2009\u202f])\d{3}(?:\1\d{3})*")
_SCIENTIFIC = re.compile(r"(?<![\w.])(\d+)[eE]([+-]?\d+)(?![\w.])")

_BINOPS = {
    ast.Add: op.add,
    ast.Sub: op.sub,
    ast.Mult: op.mul,
    ast.FloorDiv: op.floordiv,
    ast.Mod: op.mod,
    ast.Pow: pow,
    ast.LShift: op.lshift,
    ast.RShift: op.rshift,
    ast.BitAnd: op.and_,
    ast.BitOr: op.or_,
    ast.BitXor: op.xor,
}
_UNARYOPS = {ast.UAdd: op.pos, ast.USub: op.neg, ast.Invert: op.invert}

_FACTORIAL = "__factorial__"
_MAX_NODES = 256
_MAX_SHIFT = 1 << 20


class _ExprError(Exception):
    pass


def _literal(s: str) -> int | None:
    if _GROUPED.fullmatch(s):
        digits = int(re.sub(r"\D", "", s))
        return -digits if s.startswith("-") else digits
    # base 0 takes prefixes and underscores; base 10 also takes leading zeros
    for base in (0, 10):
        try:
            return int(s, base)
        except ValueError:
            continue
    return None


def _expand_factorials(expr: str) -> str:
    """Postfix n! and (expr)! become calls; a bare '!' or n!! is an error."""
    out = ""
    opens: list[int] = []
    operand: int | None = None   # where the operand ending at the tail of out starts
    i = 0
    while i < len(expr):
        ch = expr[i]
        if ch.isalnum() or ch == "_":
            j = i
            while j < len(expr) and (expr[j].isalnum() or expr[j] == "_"):
                j += 1
            operand = len(out)
            out += expr[i:j]
            i = j
            continue
        if ch == "!":
            if operand is None:
                raise _ExprError("'!' needs a number or a parenthesised expression on its left")
            out = f"{out[:operand]}{_FACTORIAL}({out[operand:].strip()})"
            operand = None
        else:
            if ch == "(":
                opens.append(len(out))
                operand = None
            elif ch == ")":
                if not opens:
                    raise _ExprError("unbalanced parentheses")
                operand = opens.pop()
            elif not ch.isspace():
                operand = None
            out += ch
        i += 1
    return out


def _expand_scientific(expr: str) -> str:
    def repl(m: re.Match) -> str:
        if int(m.group(2)) < 0:
            raise _ExprError("a negative power of ten is not an integer")
        return f"({m.group(1)}*10**{int(m.group(2))})"

    return _SCIENTIFIC.sub(repl, expr)


class _IntEvaluator(ast.NodeVisitor):
    def __init__(self, limit: int):
        self.limit = limit

    def generic_visit(self, node):
        raise _ExprError(f"{type(node).__name__} is not allowed")

    def visit_Expression(self, node):
        return self.visit(node.body)

    def visit_Constant(self, node):
        if type(node.value) is not int:
            raise _ExprError(f"{node.value!r} is not an integer")
        return guard_digits(node.value)

    def visit_UnaryOp(self, node):
        fn = _UNARYOPS.get(type(node.op))
        if fn is None:
            raise _ExprError(f"{type(node.op).__name__} is not allowed")
        return fn(self.visit(node.operand))

    def visit_BinOp(self, node):
        fn = _BINOPS.get(type(node.op))
        if fn is None:
            raise _ExprError(f"{type(node.op).__name__} is not allowed")
        left, right = self.visit(node.left), self.visit(node.right)
        kind = type(node.op)
        if kind is ast.Pow:
            if right < 0:
                raise _ExprError("negative exponents are not allowed")
            if abs(left) > 1 and right * math.log10(abs(left)) >= self.limit:
                raise UserInputError(f"power has more than {self.limit} decimal digits")
        elif kind in (ast.FloorDiv, ast.Mod) and right == 0:
            raise _ExprError("division by zero")
        elif kind in (ast.LShift, ast.RShift) and not 0 <= right <= _MAX_SHIFT:
            raise _ExprError("shift count out of range")
        return fn(left, right)

    def visit_Call(self, node):
        if not (isinstance(node.func, ast.Name) and node.func.id == _FACTORIAL):
            raise _ExprError("function calls are not allowed")
        if len(node.args) != 1 or node.keywords:
            raise _ExprError("factorial takes exactly one operand")
        n = self.visit(node.args[0])
        if n < 0:
            raise _ExprError("factorial of a negative number")
        # log10(n!) > n for n >= 25
        if n > self.limit + 25:
            raise UserInputError(f"{n}! has more than {self.limit} decimal digits")
        return math.factorial(n)


def parse_int(text: str) -> int:
    """Parse a literal or an integer expression; UserInputError otherwise."""
    s = (text or "").strip()
    if not s:
        raise UserInputError("empty input: expected an integer")

    value = _literal(s)
    if value is not None:
        return guard_digits(value)

    try:
        expr = _expand_scientific(_expand_factorials(s))
        tree = ast.parse(expr, mode="eval")
        if sum(1 for _ in ast.walk(tree)) > _MAX_NODES:
            raise _ExprError("expression too large")
        return guard_digits(_IntEvaluator(max_digits()).visit(tree))
    except SyntaxError as e:
        raise UserInputError(f"not an integer expression: {text!r}") from e
    except _ExprError as e:
        raise UserInputError(f"not an integer expression: {text!r} ({e})") from e
