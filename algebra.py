# algebra.py
"""
Tiny expression evaluator used for answer-equivalence checks.

Supports + - * / ^, parentheses, numeric literals and named variables.
Equivalence is checked numerically at a fixed set of sample points, so it is
a likelihood test, not a symbolic proof.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Union


class ParseError(ValueError):
    """Expression could not be tokenized, parsed or evaluated."""


# --- Tokens -----------------------------------------------------------------------


@dataclass(frozen=True)
class Num:
    value: float


@dataclass(frozen=True)
class Var:
    name: str


@dataclass(frozen=True)
class Op:
    op: str


@dataclass(frozen=True)
class LParen:
    pass


@dataclass(frozen=True)
class RParen:
    pass


Token = Union[Num, Var, Op, LParen, RParen]
RpnToken = Union[Num, Var, Op]

OPERATORS = "+-*/^"
PRECEDENCE = {"+": 1, "-": 1, "*": 2, "/": 2, "^": 3}

# Deterministic sample points; no randomness in grading.
SAMPLES = (-2, -1, 0, 1, 2, 3)
EQUIVALENCE_TOL = 1e-6

_WS_RE = re.compile(r"\s+")
_NUM_RE = re.compile(r"[0-9.]+")
_IDENT_RE = re.compile(r"[A-Za-z][A-Za-z0-9_]*")


def tokenize(expr: str) -> List[Token]:
    s = _WS_RE.sub("", expr)
    out: List[Token] = []
    i = 0
    while i < len(s):
        ch = s[i]
        if ch == "(":
            out.append(LParen())
            i += 1
            continue
        if ch == ")":
            out.append(RParen())
            i += 1
            continue
        if ch in OPERATORS:
            out.append(Op(ch))
            i += 1
            continue

        m = _NUM_RE.match(s, i)
        if m:
            raw = m.group(0)
            try:
                value = float(raw)
            except ValueError:
                raise ParseError(f"Malformed number: {raw!r}") from None
            if not math.isfinite(value):
                raise ParseError(f"Number out of range: {raw!r}")
            out.append(Num(value))
            i = m.end()
            continue

        m = _IDENT_RE.match(s, i)
        if m:
            out.append(Var(m.group(0)))
            i = m.end()
            continue

        raise ParseError(f"Unexpected character: {ch!r}")
    return out


# --- Shunting-yard ----------------------------------------------------------------


def _desugar_unary_minus(tokens: Iterable[Token]) -> List[Token]:
    # "-x" at the start, after an operator or after "(" becomes "0 - x"
    normalized: List[Token] = []
    for t in tokens:
        if isinstance(t, Op) and t.op == "-":
            prev = normalized[-1] if normalized else None
            if prev is None or isinstance(prev, (Op, LParen)):
                normalized.append(Num(0.0))
        normalized.append(t)
    return normalized


def to_rpn(tokens: Iterable[Token]) -> List[RpnToken]:
    output: List[RpnToken] = []
    ops: List[Token] = []

    for t in _desugar_unary_minus(tokens):
        if isinstance(t, (Num, Var)):
            output.append(t)
        elif isinstance(t, Op):
            while ops and isinstance(ops[-1], Op):
                top = ops[-1]
                p1, p2 = PRECEDENCE[top.op], PRECEDENCE[t.op]
                # '^' is right-associative
                should_pop = p1 > p2 if t.op == "^" else p1 >= p2
                if not should_pop:
                    break
                output.append(ops.pop())
            ops.append(t)
        elif isinstance(t, LParen):
            ops.append(t)
        else:
            while ops and not isinstance(ops[-1], LParen):
                output.append(ops.pop())
            if not ops:
                raise ParseError("Unmatched ')'")
            ops.pop()

    while ops:
        top = ops.pop()
        if not isinstance(top, Op):
            raise ParseError("Unmatched '('")
        output.append(top)
    return output


# --- Evaluation -------------------------------------------------------------------


def _apply_op(op: str, a: float, b: float) -> float:
    try:
        if op == "+":
            res = a + b
        elif op == "-":
            res = a - b
        elif op == "*":
            res = a * b
        elif op == "/":
            res = a / b
        else:
            res = math.pow(a, b)
    except (ZeroDivisionError, OverflowError, ValueError):
        raise ParseError(f"Could not evaluate {a} {op} {b}") from None
    if not math.isfinite(res):
        raise ParseError(f"Non-finite result for {a} {op} {b}")
    return res


def eval_rpn(rpn: Iterable[RpnToken], bindings: Mapping[str, float]) -> float:
    stack: List[float] = []
    for t in rpn:
        if isinstance(t, Num):
            stack.append(t.value)
        elif isinstance(t, Var):
            v = bindings.get(t.name)
            if v is None or not math.isfinite(v):
                raise ParseError(f"Unbound variable: {t.name}")
            stack.append(float(v))
        else:
            if len(stack) < 2:
                raise ParseError(f"Missing operand for {t.op!r}")
            b = stack.pop()
            a = stack.pop()
            stack.append(_apply_op(t.op, a, b))

    if len(stack) != 1:
        raise ParseError("Malformed expression")
    return stack[0]


def compile_expression(expr: str) -> Callable[[Mapping[str, float]], float]:
    """Parse once, evaluate many times. Raises ParseError on malformed input."""
    rpn = to_rpn(tokenize(expr))
    return lambda bindings: eval_rpn(rpn, bindings)


def evaluate(expr: str, bindings: Mapping[str, float] | None = None) -> float:
    return compile_expression(expr)(bindings or {})


def equivalent(expected: str, actual: str, variables: Iterable[str]) -> bool:
    """
    True when both expressions agree at every sample point.

    All variables are bound to the same sample value at once, so expressions
    that only differ when variables differ (e.g. x-y vs y-x) are not told apart.
    """
    try:
        f = compile_expression(expected)
        g = compile_expression(actual)
    except ParseError:
        return False

    names = list(variables)
    for x in SAMPLES:
        env: Dict[str, float] = {name: float(x) for name in names}
        try:
            diff = abs(f(env) - g(env))
        except ParseError:
            return False
        if diff > EQUIVALENCE_TOL:
            return False
    return True
