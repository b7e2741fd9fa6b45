"""
规范化 - 表格展开与字段收集

职责：
1. 展开表格定义：rowCount + fieldPrefix 生成行；values 紧凑写法展开为完整单元格
2. 派生单元格字段名：{prefix}_{suffix}_{i} 或 {prefix}_col{c}_{i}（i 从1开始）
3. 收集全表字段（顶层字段 + 独立字段元素 + 表格单元格字段）

测试要点：
- test_expand_row_count: rowCount 生成行与派生字段名
- test_expand_values_row: values 写法按列类型/值推断单元格
- test_collect_field_names: 收集顺序与路径
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Union

from ..models import (
    FieldContent,
    FormField,
    FormSchema,
    TableCellField,
    TableCellLabel,
    TableColumn,
    TableContent,
    TableRow,
)

logger = logging.getLogger(__name__)

IDENTIFIER_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")

Cell = Union[TableCellLabel, TableCellField]


@dataclass(frozen=True)
class DeclaredField:
    """已声明字段及其在源文档中的路径"""
    name: str
    path: str
    field: FormField


def derive_cell_name(prefix: str, column: TableColumn, column_index: int, row_number: int) -> str:
    """派生单元格字段名"""
    if column.field_suffix:
        return f"{prefix}_{column.field_suffix}_{row_number}"
    return f"{prefix}_col{column_index}_{row_number}"


def _generated_cell(table: TableContent, column: TableColumn, column_index: int, row_number: int) -> Cell:
    if column.cell_type == "label":
        return TableCellLabel(value="")
    name = derive_cell_name(table.field_prefix or "", column, column_index, row_number)
    if column.cell_type == "dropdown":
        return TableCellField(type="dropdown", field_name=name, options=column.options)
    if column.cell_type == "checkbox":
        return TableCellField(type="checkbox", field_name=name)
    return TableCellField(type="text", field_name=name)


def _value_cell(
    table: TableContent,
    column: TableColumn,
    column_index: int,
    row_number: int,
    value: str | bool | float,
) -> Cell:
    """values 紧凑写法中的单个值 -> 单元格"""
    if column.cell_type == "label":
        return TableCellLabel(value=_text(value))

    if isinstance(value, bool):
        # 布尔值只能作为复选框默认值，字段名需要从前缀派生
        if column.cell_type in (None, "checkbox") and table.field_prefix:
            name = derive_cell_name(table.field_prefix, column, column_index, row_number)
            return TableCellField(type="checkbox", field_name=name, default=value)
        return TableCellLabel(value=_text(value))

    name = _text(value)
    if name == "":
        return TableCellLabel(value="")

    if column.cell_type == "dropdown":
        return TableCellField(type="dropdown", field_name=name, options=column.options)
    if column.cell_type == "checkbox":
        return TableCellField(type="checkbox", field_name=name)
    if column.cell_type == "text":
        return TableCellField(type="text", field_name=name)

    # 未指定列类型：形如标识符的值当作文本字段名，其余为静态文本
    if IDENTIFIER_RE.match(name):
        return TableCellField(type="text", field_name=name)
    return TableCellLabel(value=name)


def _text(value: str | bool | float) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _expand_row(table: TableContent, row: TableRow, row_number: int) -> list[Cell]:
    columns = table.columns
    if row.cells is not None:
        cells: list[Cell] = list(row.cells)
    elif row.values is not None:
        cells = [
            _value_cell(table, columns[c], c, row_number, value)
            for c, value in enumerate(row.values[: len(columns)])
        ]
    else:
        cells = []

    if len(cells) > len(columns):
        logger.warning(f"表格行 {row_number} 的单元格多于列数，多余部分被忽略")
        cells = cells[: len(columns)]
    while len(cells) < len(columns):
        cells.append(TableCellLabel(value=""))
    return cells


def expand_table(table: TableContent) -> list[list[Cell]]:
    """
    展开表格为逐行单元格列表（每行单元格数 == 列数）

    rowCount 与 fieldPrefix 同时给出时按列模板生成行，否则使用显式 rows。
    """
    if table.row_count and table.field_prefix:
        return [
            [_generated_cell(table, col, c, i) for c, col in enumerate(table.columns)]
            for i in range(1, table.row_count + 1)
        ]
    return [_expand_row(table, row, i) for i, row in enumerate(table.rows or [], start=1)]


def cell_to_form_field(cell: TableCellField) -> FormField:
    """单元格字段 -> 规范字段"""
    return FormField(
        name=cell.field_name,
        type=cell.type,
        options=cell.options,
        default=cell.default,
        label_position="none",
    )


def collect_declared_fields(schema: FormSchema) -> list[DeclaredField]:
    """按声明顺序收集全表字段（含派生的表格单元格字段）"""
    declared: list[DeclaredField] = []

    for i, element in enumerate(schema.content):
        if isinstance(element, FieldContent):
            declared.append(
                DeclaredField(element.field_name, f"/content/{i}/fieldName", element.to_form_field())
            )
        elif isinstance(element, TableContent):
            for r, row in enumerate(expand_table(element)):
                for c, cell in enumerate(row):
                    if isinstance(cell, TableCellField):
                        declared.append(
                            DeclaredField(
                                cell.field_name,
                                f"/content/{i}/rows/{r}/cells/{c}",
                                cell_to_form_field(cell),
                            )
                        )

    for i, field in enumerate(schema.fields):
        declared.append(DeclaredField(field.name, f"/fields/{i}/name", field))

    return declared


def all_form_fields(schema: FormSchema) -> list[FormField]:
    """全表字段（规范化后）"""
    return [d.field for d in collect_declared_fields(schema)]
