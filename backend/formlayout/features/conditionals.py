"""
条件显示 - 触发器求值、字段状态计算与浏览器脚本生成

职责：
1. 触发器求值（equals / notEquals / contains / greaterThan / lessThan / isEmpty / isNotEmpty）
2. 按规则顺序计算字段可见/可用状态（初始全部可见、可用）
3. 生成浏览器端脚本

测试要点：
- test_evaluate_trigger: 各运算符
- test_evaluate_conditionals: 规则顺序与 show/hide/enable/disable
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..models import ConditionalTrigger, FormSchema
from ..schema.normalizer import collect_declared_fields
from .formula import coerce_number

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if value is None:
        return ""
    return str(value)


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _as_number(value: Any) -> float | None:
    if _is_empty(value):
        return None
    if isinstance(value, (bool, int, float)):
        return coerce_number(value)
    text = str(value).strip()
    try:
        return float(text)
    except ValueError:
        return None


def evaluate_trigger(trigger: ConditionalTrigger, values: Mapping[str, Any]) -> bool:
    """求值单个触发器"""
    actual = values.get(trigger.field)
    expected = trigger.value
    op = trigger.operator

    if op in ("equals", "notEquals"):
        if isinstance(expected, list):
            matched = _as_text(actual) in expected
        elif isinstance(expected, bool):
            matched = actual is expected
        else:
            matched = _as_text(actual) == _as_text(expected)
        return matched if op == "equals" else not matched

    if op == "contains":
        if not isinstance(actual, str):
            return False
        if isinstance(expected, list):
            return any(v in actual for v in expected)
        return _as_text(expected) in actual

    if op in ("greaterThan", "lessThan"):
        left = _as_number(actual)
        right = _as_number(expected)
        if left is None or right is None:
            return False
        return left > right if op == "greaterThan" else left < right

    if op == "isEmpty":
        return _is_empty(actual)
    if op == "isNotEmpty":
        return not _is_empty(actual)

    return False


@dataclass
class FieldStates:
    """字段可见/可用状态"""
    visible: dict[str, bool] = field(default_factory=dict)
    enabled: dict[str, bool] = field(default_factory=dict)

    def hidden_fields(self) -> list[str]:
        return [name for name, shown in self.visible.items() if not shown]

    def disabled_fields(self) -> list[str]:
        return [name for name, on in self.enabled.items() if not on]


def evaluate_conditionals(schema: FormSchema, values: Mapping[str, Any]) -> FieldStates:
    """按规则顺序计算字段状态（后面的规则覆盖前面的）"""
    names = [declared.name for declared in collect_declared_fields(schema)]
    states = FieldStates(
        visible={name: True for name in names},
        enabled={name: True for name in names},
    )

    for rule in schema.conditional_fields:
        if not evaluate_trigger(rule.trigger, values):
            continue
        for name in rule.show:
            states.visible[name] = True
        for name in rule.hide:
            states.visible[name] = False
        for name in rule.enable:
            states.enabled[name] = True
        for name in rule.disable:
            states.enabled[name] = False

    return states


def trigger_fields(schema: FormSchema) -> list[str]:
    """控制条件规则的字段（去重保序）"""
    result: list[str] = []
    for rule in schema.conditional_fields:
        if rule.trigger.field not in result:
            result.append(rule.trigger.field)
    return result


# ============================================================================
# 浏览器脚本
# ============================================================================

def _js_condition(trigger: ConditionalTrigger) -> str:
    ref = f"getFieldValue({json.dumps(trigger.field)})"
    value = json.dumps(trigger.value)
    op = trigger.operator

    if op in ("equals", "notEquals"):
        if isinstance(trigger.value, list):
            code = f"{value}.indexOf(String({ref})) !== -1"
        elif isinstance(trigger.value, bool):
            code = f"{ref} === {value}"
        else:
            code = f"String({ref}) === {json.dumps(_as_text(trigger.value))}"
        return code if op == "equals" else f"!({code})"
    if op == "contains":
        if isinstance(trigger.value, list):
            return f"{value}.some(function(v) {{ return String({ref}).indexOf(v) !== -1; }})"
        return f"String({ref}).indexOf({json.dumps(_as_text(trigger.value))}) !== -1"
    if op == "greaterThan":
        return f"parseFloat({ref}) > {value}"
    if op == "lessThan":
        return f"parseFloat({ref}) < {value}"
    if op == "isEmpty":
        return f"isEmpty({ref})"
    if op == "isNotEmpty":
        return f"!isEmpty({ref})"
    return "false"


def generate_conditional_script(schema: FormSchema) -> str:
    """生成浏览器端条件显示脚本（无规则时返回空字符串）"""
    rules = schema.conditional_fields
    if not rules:
        return ""

    blocks: list[str] = []
    for index, rule in enumerate(rules, start=1):
        actions = (
            [f"        setVisible({json.dumps(n)}, true);" for n in rule.show]
            + [f"        setVisible({json.dumps(n)}, false);" for n in rule.hide]
            + [f"        setEnabled({json.dumps(n)}, true);" for n in rule.enable]
            + [f"        setEnabled({json.dumps(n)}, false);" for n in rule.disable]
        )
        blocks.append(
            f"      // Rule {index}: {rule.trigger.field} {rule.trigger.operator} {json.dumps(rule.trigger.value)}\n"
            f"      if ({_js_condition(rule.trigger)}) {{\n"
            + "\n".join(actions)
            + "\n      }"
        )

    listeners = "\n".join(
        f"    listen({json.dumps(name)});" for name in trigger_fields(schema)
    )
    body = "\n".join(blocks)

    return f"""// Conditional field visibility
(function() {{
  function wrapper(name) {{
    var el = document.getElementById(name);
    return document.querySelector('[data-field="' + name + '"]') ||
      (el ? el.closest('.form-group') || el : null);
  }}

  function setVisible(name, visible) {{
    var w = wrapper(name);
    if (w) w.style.display = visible ? '' : 'none';
  }}

  function setEnabled(name, enabled) {{
    var el = document.getElementById(name);
    if (el) el.disabled = !enabled;
  }}

  function isEmpty(v) {{
    return v === undefined || v === null || v === '';
  }}

  function getFieldValue(name) {{
    var el = document.getElementById(name);
    if (!el) return undefined;
    if (el.type === 'checkbox') return el.checked;
    if (el.type === 'radio') {{
      var checked = document.querySelector('input[name="' + name + '"]:checked');
      return checked ? checked.value : undefined;
    }}
    return el.value;
  }}

  function listen(name) {{
    var el = document.getElementById(name);
    if (el) el.addEventListener('change', evaluateConditionals);
  }}

  function evaluateConditionals() {{
{body}
  }}

  document.addEventListener('DOMContentLoaded', function() {{
{listeners}
    evaluateConditionals();
  }});
}})();
"""
