"""JSON serialization/deserialization for the Bisaya++ AST.

This module converts between Bisaya++ AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Data types are stored by
their keyword (`"NUMERO"`, `"TIPIK"`, ...) and positions as `[line, column]`
pairs, so a program read back with `ast_from_obj` can be run without
parsing the source again.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .ast import (
    Program,
    Block,
    Binding,
    VarDecl,
    InputStmt,
    OutputStmt,
    ElseIf,
    IfStmt,
    ForLoop,
    Identifier,
    Assign,
    Binary,
    Unary,
    IntLit,
    FloatLit,
    CharLit,
    TextLit,
    BoolLit,
    Empty,
)
from .errors import Position
from .types import DataType


def position_to_obj(position: Optional[Position]) -> Any:
    if position is None:
        return None
    return [position.line, position.column]


def position_from_obj(o: Any) -> Optional[Position]:
    if o is None:
        return None
    return Position(o[0], o[1])


def _base(type_name: str, node: Any) -> Dict[str, Any]:
    return {"type": type_name, "position": position_to_obj(node.position)}


def _expr(type_name: str, node: Any) -> Dict[str, Any]:
    obj = _base(type_name, node)
    obj["data_type"] = node.data_type.value
    return obj


LITERAL_NAMES = {
    IntLit: "IntLit",
    FloatLit: "FloatLit",
    CharLit: "CharLit",
    TextLit: "TextLit",
    BoolLit: "BoolLit",
}


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    # Statements
    if isinstance(node, Program):
        return {**_base("Program", node), "body": [ast_to_obj(n) for n in node.body]}
    if isinstance(node, Block):
        return {**_base("Block", node), "body": [ast_to_obj(n) for n in node.body]}
    if isinstance(node, VarDecl):
        return {
            **_base("VarDecl", node),
            "decl_type": node.decl_type.value,
            "bindings": [{"name": b.name, "initializer": ast_to_obj(b.initializer)} for b in node.bindings],
        }
    if isinstance(node, InputStmt):
        return {**_base("InputStmt", node), "targets": list(node.targets)}
    if isinstance(node, OutputStmt):
        return {**_base("OutputStmt", node), "items": [ast_to_obj(i) for i in node.items]}
    if isinstance(node, IfStmt):
        return {
            **_base("IfStmt", node),
            "condition": ast_to_obj(node.condition),
            "then_block": ast_to_obj(node.then_block),
            "else_ifs": [
                {"condition": ast_to_obj(e.condition), "block": ast_to_obj(e.block)} for e in node.else_ifs
            ],
            "else_block": ast_to_obj(node.else_block),
        }
    if isinstance(node, ForLoop):
        return {
            **_base("ForLoop", node),
            "init": ast_to_obj(node.init),
            "condition": ast_to_obj(node.condition),
            "increment": ast_to_obj(node.increment),
            "body": ast_to_obj(node.body),
        }

    # Expressions
    if isinstance(node, Identifier):
        return {**_expr("Identifier", node), "name": node.name}
    if isinstance(node, Assign):
        return {**_expr("Assign", node), "target": ast_to_obj(node.target), "value": ast_to_obj(node.value)}
    if isinstance(node, Binary):
        return {**_expr("Binary", node), "op": node.op, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, Unary):
        return {**_expr("Unary", node), "op": node.op, "operand": ast_to_obj(node.operand)}
    if type(node) in LITERAL_NAMES:
        return {**_expr(LITERAL_NAMES[type(node)], node), "value": node.value}
    if isinstance(node, Empty):
        return _base("Empty", node)

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    position = position_from_obj(obj.get("position"))
    data_type = DataType(obj["data_type"]) if "data_type" in obj else None

    if t == "Program":
        return Program([ast_from_obj(n) for n in obj["body"]], position=position)
    if t == "Block":
        return Block([ast_from_obj(n) for n in obj["body"]], position=position)
    if t == "VarDecl":
        bindings = [Binding(b["name"], ast_from_obj(b.get("initializer"))) for b in obj["bindings"]]
        return VarDecl(DataType(obj["decl_type"]), bindings, position=position)
    if t == "InputStmt":
        return InputStmt(list(obj["targets"]), position=position)
    if t == "OutputStmt":
        return OutputStmt([ast_from_obj(i) for i in obj["items"]], position=position)
    if t == "IfStmt":
        return IfStmt(
            ast_from_obj(obj["condition"]),
            ast_from_obj(obj["then_block"]),
            [ElseIf(ast_from_obj(e["condition"]), ast_from_obj(e["block"])) for e in obj.get("else_ifs", [])],
            ast_from_obj(obj.get("else_block")),
            position=position,
        )
    if t == "ForLoop":
        return ForLoop(
            ast_from_obj(obj["init"]),
            ast_from_obj(obj["condition"]),
            ast_from_obj(obj["increment"]),
            ast_from_obj(obj["body"]),
            position=position,
        )
    if t == "Identifier":
        return Identifier(obj["name"], data_type=data_type, position=position)
    if t == "Assign":
        return Assign(ast_from_obj(obj["target"]), ast_from_obj(obj["value"]), data_type=data_type, position=position)
    if t == "Binary":
        return Binary(obj["op"], ast_from_obj(obj["left"]), ast_from_obj(obj["right"]),
                      data_type=data_type, position=position)
    if t == "Unary":
        return Unary(obj["op"], ast_from_obj(obj["operand"]), data_type=data_type, position=position)
    if t == "IntLit":
        return IntLit(int(obj["value"]), position=position)
    if t == "FloatLit":
        return FloatLit(float(obj["value"]), position=position)
    if t == "CharLit":
        return CharLit(obj["value"], position=position)
    if t == "TextLit":
        return TextLit(obj["value"], position=position)
    if t == "BoolLit":
        return BoolLit(bool(obj["value"]), position=position)
    if t == "Empty":
        return Empty(position=position)

    raise ValueError(f"Unknown AST node type: {t}")
