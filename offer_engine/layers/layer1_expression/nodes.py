"""Immutable expression tree produced by the parser."""

from dataclasses import dataclass
from typing import Union

LiteralValue = Union[float, str, bool]


@dataclass(frozen=True)
class Literal:
    value: LiteralValue


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class UnaryOp:
    op: str  # "!" or "-"
    operand: "Node"


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class Ternary:
    condition: "Node"
    if_true: "Node"
    if_false: "Node"


Node = Union[Literal, Identifier, UnaryOp, BinaryOp, Ternary]


def referenced_identifiers(node: Node) -> list[str]:
    """트리에 등장하는 식별자 이름을 처음 등장한 순서대로 반환합니다."""
    names: list[str] = []

    def walk(current: Node) -> None:
        if isinstance(current, Identifier):
            if current.name not in names:
                names.append(current.name)
        elif isinstance(current, UnaryOp):
            walk(current.operand)
        elif isinstance(current, BinaryOp):
            walk(current.left)
            walk(current.right)
        elif isinstance(current, Ternary):
            walk(current.condition)
            walk(current.if_true)
            walk(current.if_false)

    walk(node)
    return names


def tree_depth(node: Node) -> int:
    """트리의 최대 깊이 (리프만 있으면 1). 재귀 없이 계산합니다."""
    deepest = 0
    stack = [(node, 1)]
    while stack:
        current, depth = stack.pop()
        deepest = max(deepest, depth)
        if isinstance(current, UnaryOp):
            stack.append((current.operand, depth + 1))
        elif isinstance(current, BinaryOp):
            stack.extend([(current.left, depth + 1), (current.right, depth + 1)])
        elif isinstance(current, Ternary):
            stack.extend(
                [(current.condition, depth + 1), (current.if_true, depth + 1), (current.if_false, depth + 1)]
            )
    return deepest
