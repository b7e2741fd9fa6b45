"""
公式求值 - 词法分析 + 递归下降解析 + 求值

文法（固定，不执行任何动态代码）：
    expr   := term (('+' | '-') term)*
    term   := factor (('*' | '/') factor)*
    factor := ('+' | '-') factor | NUMBER | IDENT | '(' expr ')'

字段取值规则：
- 缺失 / 空字符串 -> 0
- 布尔 -> 1 / 0
- 字符串取前导数字（"12.5kg" -> 12.5），无数字 -> 0

测试要点：
- test_tokenize: 词法
- test_precedence: 运算优先级与括号
- test_unary_minus: 一元负号
- test_division_by_zero: 除零返回 None
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Union

from ..interfaces import FormulaSyntaxError

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(
    r"\s*(?:(?P<number>\d+(?:\.\d*)?|\.\d+)|(?P<ident>[A-Za-z_][A-Za-z0-9_]*)|(?P<op>[-+*/()]))"
)
_IDENT_SCAN_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_LEADING_NUMBER_RE = re.compile(r"^\s*[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")


@dataclass(frozen=True)
class Token:
    kind: str  # number / ident / op
    text: str
    pos: int


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class FieldRef:
    name: str


@dataclass(frozen=True)
class Unary:
    op: str
    operand: Node


@dataclass(frozen=True)
class Binary:
    op: str
    left: Node
    right: Node


Node = Union[Number, FieldRef, Unary, Binary]


def tokenize(formula: str) -> list[Token]:
    """词法分析"""
    tokens: list[Token] = []
    pos = 0
    length = len(formula)
    while pos < length:
        if formula[pos].isspace():
            pos += 1
            continue
        match = _TOKEN_RE.match(formula, pos)
        if match is None or match.end() == pos:
            raise FormulaSyntaxError(f"公式中出现非法字符 '{formula[pos]}' (位置 {pos}): {formula}")
        kind = match.lastgroup or "op"
        tokens.append(Token(kind, match.group(kind), match.start(kind)))
        pos = match.end()
    return tokens


def scan_identifiers(formula: str) -> list[str]:
    """宽松扫描公式中的标识符（不要求语法合法，按出现顺序去重）"""
    seen: list[str] = []
    for name in _IDENT_SCAN_RE.findall(formula):
        if name not in seen:
            seen.append(name)
    return seen


class _Parser:
    """递归下降解析器"""

    def __init__(self, formula: str):
        self.formula = formula
        self.tokens = tokenize(formula)
        self.index = 0

    def parse(self) -> Node:
        if not self.tokens:
            raise FormulaSyntaxError("公式为空")
        node = self._expr()
        if self.index < len(self.tokens):
            token = self.tokens[self.index]
            raise FormulaSyntaxError(f"多余的符号 '{token.text}' (位置 {token.pos}): {self.formula}")
        return node

    def _peek(self) -> Token | None:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _take(self) -> Token:
        token = self._peek()
        if token is None:
            raise FormulaSyntaxError(f"公式意外结束: {self.formula}")
        self.index += 1
        return token

    def _expr(self) -> Node:
        node = self._term()
        token = self._peek()
        while token is not None and token.text in ("+", "-"):
            self.index += 1
            node = Binary(token.text, node, self._term())
            token = self._peek()
        return node

    def _term(self) -> Node:
        node = self._factor()
        token = self._peek()
        while token is not None and token.text in ("*", "/"):
            self.index += 1
            node = Binary(token.text, node, self._factor())
            token = self._peek()
        return node

    def _factor(self) -> Node:
        token = self._take()
        if token.kind == "op" and token.text in ("+", "-"):
            return Unary(token.text, self._factor())
        if token.kind == "number":
            return Number(float(token.text))
        if token.kind == "ident":
            return FieldRef(token.text)
        if token.text == "(":
            node = self._expr()
            closing = self._take()
            if closing.text != ")":
                raise FormulaSyntaxError(f"缺少右括号 (位置 {closing.pos}): {self.formula}")
            return node
        raise FormulaSyntaxError(f"意外的符号 '{token.text}' (位置 {token.pos}): {self.formula}")


def parse(formula: str) -> Node:
    """解析公式为语法树"""
    return _Parser(formula).parse()


def field_references(node: Node) -> list[str]:
    """语法树中引用的字段名（按出现顺序去重）"""
    names: list[str] = []

    def walk(n: Node) -> None:
        if isinstance(n, FieldRef):
            if n.name not in names:
                names.append(n.name)
        elif isinstance(n, Unary):
            walk(n.operand)
        elif isinstance(n, Binary):
            walk(n.left)
            walk(n.right)

    walk(node)
    return names


def coerce_number(value: Any) -> float:
    """字段值 -> 数值"""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    match = _LEADING_NUMBER_RE.match(str(value))
    return float(match.group(0)) if match else 0.0


def evaluate(node: Node, values: Mapping[str, Any]) -> float:
    """
    求值语法树

    Raises:
        ZeroDivisionError: 除数为0
    """
    if isinstance(node, Number):
        return node.value
    if isinstance(node, FieldRef):
        return coerce_number(values.get(node.name))
    if isinstance(node, Unary):
        operand = evaluate(node.operand, values)
        return -operand if node.op == "-" else operand
    if isinstance(node, Binary):
        left = evaluate(node.left, values)
        right = evaluate(node.right, values)
        if node.op == "+":
            return left + right
        if node.op == "-":
            return left - right
        if node.op == "*":
            return left * right
        return left / right
    raise TypeError(f"未知语法树节点: {node!r}")


def evaluate_formula(formula: str, values: Mapping[str, Any]) -> float | None:
    """
    计算公式

    Returns:
        结果；语法错误、除零或结果非有限数时返回 None
    """
    try:
        node = parse(formula)
    except FormulaSyntaxError as e:
        logger.warning(f"公式无法解析: {e}")
        return None

    try:
        result = evaluate(node, values)
    except ZeroDivisionError:
        logger.debug(f"公式除零: {formula}")
        return None

    return result if math.isfinite(result) else None
