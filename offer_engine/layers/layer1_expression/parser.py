"""
Layer 1: 제한된 표현식 파서.

규칙의 조건/수량 표현식은 문자열로 저장됩니다. 이 모듈은 문자열을 토큰으로
나누고, 연산자 우선순위에 따라 재귀 하강(recursive descent)으로 불변 트리를
만듭니다. 호스트 언어의 eval은 절대 사용하지 않습니다.

우선순위 (낮음 → 높음):
┌──────────────────────────────────────────────┐
│ ternary     │ c ? a : b                      │
│ or          │ ||                             │
│ and         │ &&                             │
│ equality    │ == != (=== !== 별칭)            │
│ comparison  │ < <= > >=                      │
│ additive    │ + -                            │
│ multiplicative │ * /                         │
│ unary       │ ! -                            │
│ primary     │ 숫자, 문자열, true/false, 식별자, ( ) │
└──────────────────────────────────────────────┘

기존 시스템에 저장된 규칙은 답변을 `values.area` 또는 `values["area"]`
형태로 참조하므로, 두 형태 모두 식별자 `area`로 해석합니다.
"""

import math
import re
from dataclasses import dataclass
from functools import lru_cache

from offer_engine.exceptions import MalformedExpression
from offer_engine.layers.layer1_expression.nodes import (
    Node,
    Literal,
    Identifier,
    UnaryOp,
    BinaryOp,
    Ternary,
    tree_depth,
)

# 긴 연산자부터 매칭해야 함
_OPERATORS = (
    "===", "!==",
    "==", "!=", "<=", ">=", "&&", "||",
    "<", ">", "+", "-", "*", "/", "!", "?", ":", "(", ")", ".", "[", "]",
)
_ALIASES = {"===": "==", "!==": "!="}

_DIGITS = "0123456789"
_NUMBER_RE = re.compile(r"(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_IDENT_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
_ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", "'": "'", '"': '"'}

# 레거시 규칙에서 답변 객체를 가리키던 이름
_VALUES_OBJECT = "values"

# 괄호, 삼항, 단항 연산자의 중첩 한도
_MAX_NESTING = 32
# 평가기는 트리를 재귀로 내려가므로 긴 연산자 사슬도 제한
_MAX_TREE_DEPTH = 100


@dataclass(frozen=True)
class Token:
    kind: str  # NUMBER, STRING, IDENT, OP, EOF
    value: str
    position: int


def tokenize(expression: str) -> list[Token]:
    """표현식 문자열을 토큰 목록으로 변환합니다. 마지막은 항상 EOF."""
    tokens: list[Token] = []
    i = 0
    length = len(expression)

    while i < length:
        char = expression[i]

        if char.isspace():
            i += 1
            continue

        if char in _DIGITS or (char == "." and i + 1 < length and expression[i + 1] in _DIGITS):
            match = _NUMBER_RE.match(expression, i)
            tokens.append(Token("NUMBER", match.group(), i))
            i = match.end()
            continue

        if char in ("'", '"'):
            value, end = _read_string(expression, i)
            tokens.append(Token("STRING", value, i))
            i = end
            continue

        match = _IDENT_RE.match(expression, i)
        if match:
            tokens.append(Token("IDENT", match.group(), i))
            i = match.end()
            continue

        for op in _OPERATORS:
            if expression.startswith(op, i):
                tokens.append(Token("OP", _ALIASES.get(op, op), i))
                i += len(op)
                break
        else:
            raise MalformedExpression(expression, i, f"unexpected character '{char}'")

    tokens.append(Token("EOF", "", length))
    return tokens


def _read_string(expression: str, start: int) -> tuple[str, int]:
    quote = expression[start]
    chars: list[str] = []
    i = start + 1
    while i < len(expression):
        char = expression[i]
        if char == "\\":
            if i + 1 >= len(expression):
                break
            escaped = expression[i + 1]
            chars.append(_ESCAPES.get(escaped, escaped))
            i += 2
            continue
        if char == quote:
            return "".join(chars), i + 1
        chars.append(char)
        i += 1
    raise MalformedExpression(expression, start, "unterminated string literal")


class _Parser:
    """토큰 목록 위를 움직이는 재귀 하강 파서."""

    def __init__(self, expression: str):
        self.expression = expression
        self.tokens = tokenize(expression)
        self.index = 0
        self.nesting = 0

    # ---------- token helpers ----------

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        if token.kind != "EOF":
            self.index += 1
        return token

    def _match(self, *ops: str) -> bool:
        token = self.current
        return token.kind == "OP" and token.value in ops

    def _expect(self, op: str) -> Token:
        if not self._match(op):
            self._fail(f"expected '{op}'")
        return self._advance()

    def _fail(self, reason: str):
        token = self.current
        found = "end of expression" if token.kind == "EOF" else f"'{token.value}'"
        raise MalformedExpression(self.expression, token.position, f"{reason}, found {found}")

    def _enter(self):
        self.nesting += 1
        if self.nesting > _MAX_NESTING:
            raise MalformedExpression(
                self.expression, self.current.position, "expression nested too deeply"
            )

    def _leave(self):
        self.nesting -= 1

    # ---------- grammar ----------

    def parse(self) -> Node:
        if self.current.kind == "EOF":
            raise MalformedExpression(self.expression, 0, "empty expression")
        node = self._ternary()
        if self.current.kind != "EOF":
            self._fail("unexpected token")
        if tree_depth(node) > _MAX_TREE_DEPTH:
            raise MalformedExpression(self.expression, 0, "expression nested too deeply")
        return node

    def _ternary(self) -> Node:
        self._enter()
        try:
            condition = self._or()
            if self._match("?"):
                self._advance()
                if_true = self._ternary()
                self._expect(":")
                if_false = self._ternary()
                return Ternary(condition, if_true, if_false)
            return condition
        finally:
            self._leave()

    def _binary(self, operand, *ops: str) -> Node:
        node = operand()
        while self._match(*ops):
            op = self._advance().value
            node = BinaryOp(op, node, operand())
        return node

    def _or(self) -> Node:
        return self._binary(self._and, "||")

    def _and(self) -> Node:
        return self._binary(self._equality, "&&")

    def _equality(self) -> Node:
        return self._binary(self._comparison, "==", "!=")

    def _comparison(self) -> Node:
        return self._binary(self._additive, "<", "<=", ">", ">=")

    def _additive(self) -> Node:
        return self._binary(self._multiplicative, "+", "-")

    def _multiplicative(self) -> Node:
        return self._binary(self._unary, "*", "/")

    def _unary(self) -> Node:
        if self._match("!", "-"):
            op = self._advance().value
            self._enter()
            try:
                return UnaryOp(op, self._unary())
            finally:
                self._leave()
        return self._primary()

    def _primary(self) -> Node:
        token = self.current

        if token.kind == "NUMBER":
            self._advance()
            value = float(token.value)
            if not math.isfinite(value):
                raise MalformedExpression(
                    self.expression, token.position, "numeric literal out of range"
                )
            return Literal(value)

        if token.kind == "STRING":
            self._advance()
            return Literal(token.value)

        if token.kind == "IDENT":
            self._advance()
            if token.value == "true":
                return Literal(True)
            if token.value == "false":
                return Literal(False)
            if self._match(".", "["):
                return self._member(token)
            return Identifier(token.value)

        if self._match("("):
            self._advance()
            node = self._ternary()
            self._expect(")")
            return node

        self._fail("expected a value")

    def _member(self, owner: Token) -> Node:
        if owner.value != _VALUES_OBJECT:
            self._fail(f"member access is only supported on '{_VALUES_OBJECT}'")

        if self._match("."):
            self._advance()
            if self.current.kind != "IDENT":
                self._fail("expected a field name")
            return Identifier(self._advance().value)

        self._expect("[")
        if self.current.kind != "STRING":
            self._fail("expected a quoted field name")
        name = self._advance().value
        self._expect("]")
        return Identifier(name)


@lru_cache(maxsize=1024)
def parse_expression(expression: str) -> Node:
    """
    표현식을 파싱하여 불변 트리를 반환합니다.

    트리는 변경 불가(frozen)이므로 같은 문자열에 대한 결과를 캐시해 재사용합니다.

    Raises:
        MalformedExpression: 문법 오류
    """
    if not isinstance(expression, str):
        raise MalformedExpression(repr(expression), 0, "expression must be a string")
    return _Parser(expression).parse()
