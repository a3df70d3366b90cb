"""Layer 1: Restricted expression parser and evaluator."""

from .nodes import Node, Literal, Identifier, UnaryOp, BinaryOp, Ternary, referenced_identifiers, tree_depth
from .parser import parse_expression, tokenize
from .evaluator import evaluate, evaluate_node, is_number, type_name

__all__ = [
    "Node",
    "Literal",
    "Identifier",
    "UnaryOp",
    "BinaryOp",
    "Ternary",
    "referenced_identifiers",
    "tree_depth",
    "parse_expression",
    "tokenize",
    "evaluate",
    "evaluate_node",
    "is_number",
    "type_name",
]
