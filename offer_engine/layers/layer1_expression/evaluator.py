"""
Layer 1: 표현식 평가기.

파서가 만든 트리를 환경(environment) 위에서 재귀적으로 평가합니다.
부수효과가 없고, 같은 표현식과 같은 환경이면 항상 같은 결과를 돌려줍니다.
숫자 리터럴 파싱 외의 암묵적 타입 변환은 하지 않습니다.
"""

import math
from typing import Mapping, Union

from offer_engine.exceptions import UnboundVariable, TypeMismatch, NotANumber
from offer_engine.layers.layer1_expression.nodes import (
    Node,
    Literal,
    Identifier,
    UnaryOp,
    BinaryOp,
    Ternary,
)
from offer_engine.layers.layer1_expression.parser import parse_expression

Value = Union[float, str, bool]
Environment = Mapping[str, Value]


def is_number(value: object) -> bool:
    """bool은 int의 하위 클래스이지만 숫자로 취급하지 않습니다."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def type_name(value: object) -> str:
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


def evaluate(expression: str, environment: Environment) -> Value:
    """
    표현식 문자열을 파싱하고 평가합니다.

    Args:
        expression: 조건 또는 수량 표현식
        environment: 행 ID → 타입이 정해진 값

    Returns:
        숫자(float), 문자열 또는 불리언

    Raises:
        MalformedExpression: 문법 오류 (설정 오류)
        UnboundVariable: 환경에 없는 식별자
        TypeMismatch: 연산자와 맞지 않는 타입
        NotANumber: 0으로 나누기 등 유한하지 않은 결과
    """
    return evaluate_node(parse_expression(expression), environment)


def evaluate_node(node: Node, environment: Environment) -> Value:
    if isinstance(node, Literal):
        return node.value

    if isinstance(node, Identifier):
        if node.name not in environment:
            raise UnboundVariable(node.name)
        value = environment[node.name]
        if is_number(value):
            return float(value)
        if isinstance(value, (str, bool)):
            return value
        raise TypeMismatch(
            f"Variable '{node.name}' has unsupported type {type(value).__name__}",
            details={"name": node.name},
        )

    if isinstance(node, UnaryOp):
        return _evaluate_unary(node, environment)

    if isinstance(node, BinaryOp):
        return _evaluate_binary(node, environment)

    if isinstance(node, Ternary):
        condition = evaluate_node(node.condition, environment)
        _require_boolean("?:", condition)
        branch = node.if_true if condition else node.if_false
        return evaluate_node(branch, environment)

    raise TypeError(f"Unknown expression node: {node!r}")


def _evaluate_unary(node: UnaryOp, environment: Environment) -> Value:
    operand = evaluate_node(node.operand, environment)
    if node.op == "!":
        _require_boolean("!", operand)
        return not operand
    # "-"
    if not is_number(operand):
        raise _mismatch("-", operand)
    return -operand


def _evaluate_binary(node: BinaryOp, environment: Environment) -> Value:
    op = node.op
    left = evaluate_node(node.left, environment)

    # && / || 는 결과를 결정하는 피연산자까지만 평가
    if op in ("&&", "||"):
        _require_boolean(op, left)
        if op == "&&" and not left:
            return False
        if op == "||" and left:
            return True
        right = evaluate_node(node.right, environment)
        _require_boolean(op, right)
        return right

    right = evaluate_node(node.right, environment)

    if op in ("==", "!="):
        if type_name(left) != type_name(right):
            raise _mismatch(op, left, right)
        equal = left == right
        return equal if op == "==" else not equal

    if op in ("<", "<=", ">", ">="):
        both_numbers = is_number(left) and is_number(right)
        both_strings = isinstance(left, str) and isinstance(right, str)
        if not (both_numbers or both_strings):
            raise _mismatch(op, left, right)
        if op == "<":
            return left < right
        if op == "<=":
            return left <= right
        if op == ">":
            return left > right
        return left >= right

    if op == "+" and isinstance(left, str) and isinstance(right, str):
        return left + right

    if not (is_number(left) and is_number(right)):
        raise _mismatch(op, left, right)

    if op == "+":
        result = left + right
    elif op == "-":
        result = left - right
    elif op == "*":
        result = left * right
    elif op == "/":
        if right == 0:
            raise NotANumber("Division by zero", details={"left": left})
        result = left / right
    else:
        raise TypeError(f"Unknown operator: {op}")

    if not math.isfinite(result):
        raise NotANumber(f"Result of '{op}' is not a finite number")
    return float(result)


def _require_boolean(op: str, value: Value) -> None:
    if not isinstance(value, bool):
        raise TypeMismatch(
            f"Operator '{op}' expects a boolean, got {type_name(value)}",
            details={"operator": op, "type": type_name(value)},
        )


def _mismatch(op: str, *operands: Value) -> TypeMismatch:
    types = [type_name(v) for v in operands]
    return TypeMismatch(
        f"Operator '{op}' cannot be applied to {' and '.join(types)}",
        details={"operator": op, "types": types},
    )
