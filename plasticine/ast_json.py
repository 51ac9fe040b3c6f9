"""JSON serialization/deserialization for the Plasticine BASIC AST.

This module converts between AST dataclasses and plain Python dict/list
structures suitable for JSON encoding. It supports a full round-trip for
every node type; colours are stored by their ``Color`` value.
"""

from __future__ import annotations

import math
from typing import Any, Dict

from .ast import (
    Program,
    Let,
    Print,
    PrintLine,
    Input,
    If,
    Goto,
    Gosub,
    Return,
    For,
    Next,
    End,
    Comment,
    Random,
    SetForegroundColor,
    SetBackgroundColor,
    NumberLiteral,
    StringLiteral,
    VariableReference,
    BinaryExpression,
    UnaryExpression,
)
from .types import Color


def number_to_obj(value: float) -> Any:
    # JSON has no inf/nan
    if math.isnan(value) or math.isinf(value):
        return {"__float__": repr(value)}
    return value


def number_from_obj(obj: Any) -> float:
    if isinstance(obj, dict):
        return float(obj["__float__"])
    return float(obj)


def color_to_obj(color: Color | None) -> Any:
    return None if color is None else color.value


def color_from_obj(obj: Any) -> Color | None:
    return None if obj is None else Color(obj)


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    # Expressions
    if isinstance(node, NumberLiteral):
        return {"type": "NumberLiteral", "value": number_to_obj(node.value)}
    if isinstance(node, StringLiteral):
        return {"type": "StringLiteral", "value": node.value}
    if isinstance(node, VariableReference):
        return {"type": "VariableReference", "name": node.name}
    if isinstance(node, BinaryExpression):
        return {
            "type": "BinaryExpression",
            "left": ast_to_obj(node.left),
            "operator": node.operator,
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, UnaryExpression):
        return {"type": "UnaryExpression", "operator": node.operator, "operand": ast_to_obj(node.operand)}

    if isinstance(node, Program):
        return {"type": "Program", "statements": [ast_to_obj(s) for s in node.statements]}

    # Statements
    obj: Dict[str, Any]
    if isinstance(node, Let):
        obj = {"type": "Let", "variable_name": node.variable_name, "expression": ast_to_obj(node.expression)}
    elif isinstance(node, Print):
        obj = {"type": "Print", "values": [ast_to_obj(v) for v in node.values]}
    elif isinstance(node, PrintLine):
        obj = {"type": "PrintLine", "values": [ast_to_obj(v) for v in node.values]}
    elif isinstance(node, Input):
        obj = {"type": "Input", "variables": [ast_to_obj(v) for v in node.variables]}
    elif isinstance(node, If):
        obj = {"type": "If", "condition": ast_to_obj(node.condition), "then_branch": ast_to_obj(node.then_branch)}
    elif isinstance(node, Goto):
        obj = {"type": "Goto", "target_line": node.target_line}
    elif isinstance(node, Gosub):
        obj = {"type": "Gosub", "target_line": node.target_line}
    elif isinstance(node, Return):
        obj = {"type": "Return"}
    elif isinstance(node, For):
        obj = {
            "type": "For",
            "variable_name": node.variable_name,
            "start": ast_to_obj(node.start),
            "end": ast_to_obj(node.end),
            "step": ast_to_obj(node.step),
        }
    elif isinstance(node, Next):
        obj = {"type": "Next", "variable_name": node.variable_name}
    elif isinstance(node, End):
        obj = {"type": "End"}
    elif isinstance(node, Comment):
        obj = {"type": "Comment", "text": node.text}
    elif isinstance(node, Random):
        obj = {"type": "Random", "variable_name": node.variable_name}
    elif isinstance(node, SetForegroundColor):
        obj = {"type": "SetForegroundColor", "color": color_to_obj(node.color)}
    elif isinstance(node, SetBackgroundColor):
        obj = {"type": "SetBackgroundColor", "color": color_to_obj(node.color)}
    else:
        raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")
    obj["line_number"] = node.line_number
    return obj


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict) or "type" not in obj:
        raise ValueError(f"Invalid AST object: {obj!r}")
    t = obj["type"]

    # Expressions
    if t == "NumberLiteral":
        return NumberLiteral(value=number_from_obj(obj["value"]))
    if t == "StringLiteral":
        return StringLiteral(value=obj["value"])
    if t == "VariableReference":
        return VariableReference(name=obj["name"])
    if t == "BinaryExpression":
        return BinaryExpression(
            left=ast_from_obj(obj["left"]),
            operator=obj["operator"],
            right=ast_from_obj(obj["right"]),
        )
    if t == "UnaryExpression":
        return UnaryExpression(operator=obj["operator"], operand=ast_from_obj(obj["operand"]))

    if t == "Program":
        return Program(statements=[ast_from_obj(s) for s in obj["statements"]])

    # Statements
    line_number = obj.get("line_number")
    if t == "Let":
        return Let(obj["variable_name"], ast_from_obj(obj["expression"]), line_number=line_number)
    if t == "Print":
        return Print([ast_from_obj(v) for v in obj["values"]], line_number=line_number)
    if t == "PrintLine":
        return PrintLine([ast_from_obj(v) for v in obj["values"]], line_number=line_number)
    if t == "Input":
        return Input([ast_from_obj(v) for v in obj["variables"]], line_number=line_number)
    if t == "If":
        return If(ast_from_obj(obj["condition"]), ast_from_obj(obj["then_branch"]), line_number=line_number)
    if t == "Goto":
        return Goto(obj["target_line"], line_number=line_number)
    if t == "Gosub":
        return Gosub(obj["target_line"], line_number=line_number)
    if t == "Return":
        return Return(line_number=line_number)
    if t == "For":
        return For(
            obj["variable_name"],
            ast_from_obj(obj["start"]),
            ast_from_obj(obj["end"]),
            ast_from_obj(obj.get("step")),
            line_number=line_number,
        )
    if t == "Next":
        return Next(obj["variable_name"], line_number=line_number)
    if t == "End":
        return End(line_number=line_number)
    if t == "Comment":
        return Comment(obj.get("text", ""), line_number=line_number)
    if t == "Random":
        return Random(obj["variable_name"], line_number=line_number)
    if t == "SetForegroundColor":
        return SetForegroundColor(color_from_obj(obj.get("color")), line_number=line_number)
    if t == "SetBackgroundColor":
        return SetBackgroundColor(color_from_obj(obj.get("color")), line_number=line_number)

    raise ValueError(f"Unknown AST node type: {t}")
