"""
计算字段 - 依赖排序、求值、格式化与浏览器脚本生成

职责：
1. 构建计算字段依赖图，拓扑排序（Kahn），循环依赖显式报错
2. 按依赖顺序计算全部计算字段（前面的结果对后面的公式可见）
3. 数值格式化（number / currency / percentage / text）
4. 生成浏览器端脚本（由语法树直接生成 JS 表达式，不使用 eval）

测试要点：
- test_dependency_order: 依赖排序
- test_cycle_detection: 循环依赖 -> CalculationCycleError
- test_calculate_all: 链式计算
- test_format_value: 格式化
"""

from __future__ import annotations

import heapq
import json
import logging
from typing import Any, Mapping

from ..interfaces import CalculationCycleError, FormulaSyntaxError
from ..models import CalculatedField, FormSchema
from .formula import Binary, FieldRef, Node, Number, Unary, evaluate_formula, parse, scan_identifiers

logger = logging.getLogger(__name__)

# 校验时识别的函数关键字（求值文法本身不含函数调用）
FUNCTION_KEYWORDS = frozenset({"sum", "avg", "min", "max", "if", "and", "or"})


def formula_references(formula: str) -> list[str]:
    """公式引用的名称（排除函数关键字）"""
    return [name for name in scan_identifiers(formula) if name not in FUNCTION_KEYWORDS]


def dependency_graph(calculations: list[CalculatedField]) -> dict[str, list[str]]:
    """计算字段 -> 它依赖的其他计算字段"""
    names = {calc.name for calc in calculations}
    return {
        calc.name: [ref for ref in formula_references(calc.formula) if ref in names]
        for calc in calculations
    }


def _find_cycle(graph: dict[str, list[str]], candidates: list[str]) -> list[str]:
    """在剩余节点中找出一个环（返回首尾相同的路径）"""
    remaining = set(candidates)
    state: dict[str, int] = {}  # 1=访问中 2=完成
    stack: list[str] = []

    def visit(node: str) -> list[str] | None:
        state[node] = 1
        stack.append(node)
        for dep in graph.get(node, []):
            if dep not in remaining:
                continue
            if state.get(dep) == 1:
                return stack[stack.index(dep):] + [dep]
            if state.get(dep) is None:
                found = visit(dep)
                if found:
                    return found
        stack.pop()
        state[node] = 2
        return None

    for node in candidates:
        if state.get(node) is None:
            found = visit(node)
            if found:
                return found
    return list(candidates)


def dependency_order(calculations: list[CalculatedField]) -> list[CalculatedField]:
    """
    按依赖排序计算字段（无依赖关系时保持声明顺序）

    Raises:
        CalculationCycleError: 存在循环依赖
    """
    graph = dependency_graph(calculations)
    index = {calc.name: i for i, calc in enumerate(calculations)}
    by_name = {calc.name: calc for calc in calculations}

    indegree = {name: len(set(deps)) for name, deps in graph.items()}
    dependents: dict[str, list[str]] = {name: [] for name in graph}
    for name, deps in graph.items():
        for dep in set(deps):
            dependents[dep].append(name)

    ready = [(index[name], name) for name, degree in indegree.items() if degree == 0]
    heapq.heapify(ready)

    ordered: list[CalculatedField] = []
    while ready:
        _, name = heapq.heappop(ready)
        ordered.append(by_name[name])
        for dependent in dependents[name]:
            indegree[dependent] -= 1
            if indegree[dependent] == 0:
                heapq.heappush(ready, (index[dependent], dependent))

    if len(ordered) < len(calculations):
        unresolved = [calc.name for calc in calculations if indegree[calc.name] > 0]
        raise CalculationCycleError(_find_cycle(graph, unresolved))

    return ordered


def calculate_values(schema: FormSchema, values: Mapping[str, Any]) -> dict[str, float]:
    """按依赖顺序计算全部计算字段（原始数值，无法计算的跳过）"""
    context: dict[str, Any] = dict(values)
    results: dict[str, float] = {}
    for calc in dependency_order(schema.calculations):
        value = evaluate_formula(calc.formula, context)
        if value is None:
            continue
        results[calc.name] = value
        context[calc.name] = value
    return results


def calculate_all(schema: FormSchema, values: Mapping[str, Any]) -> dict[str, str]:
    """计算并格式化全部计算字段"""
    by_name = {calc.name: calc for calc in schema.calculations}
    return {
        name: format_value(value, by_name[name].format, by_name[name].decimals)
        for name, value in calculate_values(schema, values).items()
    }


def _js_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_value(value: float, fmt: str = "number", decimals: int = 2) -> str:
    """
    格式化计算结果

    - number: 1,234.50
    - currency: $1,234.50 / -$1,234.50
    - percentage: 输入 12.5 -> 12.50%
    - text: 原样数值文本
    """
    if fmt == "text":
        return _js_number(value)
    if fmt == "currency":
        sign = "-" if value < 0 else ""
        return f"{sign}${abs(value):,.{decimals}f}"
    if fmt == "percentage":
        return f"{value:,.{decimals}f}%"
    return f"{value:,.{decimals}f}"


# ============================================================================
# 浏览器脚本
# ============================================================================

def _js_expression(node: Node, calc_names: set[str]) -> str:
    if isinstance(node, Number):
        return _js_number(node.value)
    if isinstance(node, FieldRef):
        name = json.dumps(node.name)
        if node.name in calc_names:
            return f"(results[{name}] || 0)"
        return f"num({name})"
    if isinstance(node, Unary):
        return f"({node.op}{_js_expression(node.operand, calc_names)})"
    if isinstance(node, Binary):
        left = _js_expression(node.left, calc_names)
        right = _js_expression(node.right, calc_names)
        return f"({left} {node.op} {right})"
    raise TypeError(f"未知语法树节点: {node!r}")


def _js_format(fmt: str, decimals: int) -> str:
    opts = f"minimumFractionDigits: {decimals}, maximumFractionDigits: {decimals}"
    if fmt == "currency":
        return f"new Intl.NumberFormat('en-US', {{ style: 'currency', currency: 'USD', {opts} }}).format(result)"
    if fmt == "percentage":
        return f"new Intl.NumberFormat('en-US', {{ style: 'percent', {opts} }}).format(result / 100)"
    if fmt == "text":
        return "String(result)"
    return f"new Intl.NumberFormat('en-US', {{ {opts} }}).format(result)"


def generate_calculation_script(schema: FormSchema) -> str:
    """
    生成浏览器端计算脚本

    无计算字段时返回空字符串；无法解析的公式跳过并记录告警。
    """
    if not schema.calculations:
        return ""

    ordered = dependency_order(schema.calculations)
    calc_names = {calc.name for calc in ordered}

    steps: list[str] = []
    inputs: list[str] = []
    for calc in ordered:
        try:
            node = parse(calc.formula)
        except FormulaSyntaxError as e:
            logger.warning(f"计算字段 {calc.name} 的公式无法解析，跳过脚本生成: {e}")
            continue
        name = json.dumps(calc.name)
        steps.append(
            "\n".join(
                [
                    f"      // {calc.name} = {calc.formula}",
                    f"      result = {_js_expression(node, calc_names)};",
                    "      if (isFinite(result)) {",
                    f"        results[{name}] = result;",
                    f"        setValue({name}, {_js_format(calc.format, calc.decimals)});",
                    "      }",
                ]
            )
        )
        for ref in formula_references(calc.formula):
            if ref not in calc_names and ref not in inputs:
                inputs.append(ref)

    listeners = "\n".join(
        f"      listen({json.dumps(name)});" for name in inputs
    )
    body = "\n".join(steps)

    return f"""// Calculated fields
(function() {{
  function num(name) {{
    var el = document.getElementById(name);
    if (!el) return 0;
    if (el.type === 'checkbox') return el.checked ? 1 : 0;
    var v = parseFloat(el.value);
    return isNaN(v) ? 0 : v;
  }}

  function setValue(name, text) {{
    var el = document.getElementById(name);
    if (el) el.value = text;
  }}

  function listen(name) {{
    var el = document.getElementById(name);
    if (el) el.addEventListener('input', recalculate);
  }}

  function recalculate() {{
    var results = {{}};
    var result;
{body}
  }}

  document.addEventListener('DOMContentLoaded', function() {{
{listeners}
    recalculate();
  }});
}})();
"""
