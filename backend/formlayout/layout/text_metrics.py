"""
文本度量 - 宽度估算与自动换行

宽度估算采用平均字宽近似：len(text) * font_size * 0.5。
这不是精确字体度量，但在 Helvetica 等比例字体下对拉丁文本足够稳定；
需要精确度量时实现 ITextMeasurer 替换即可。

测试要点：
- test_estimate_width: 近似公式
- test_wrap_text: 按空格换行，超长单词独占一行
"""

from __future__ import annotations

from ..interfaces import ITextMeasurer

AVERAGE_CHAR_WIDTH = 0.5


class AverageWidthMeasurer(ITextMeasurer):
    """平均字宽估算"""

    def __init__(self, factor: float = AVERAGE_CHAR_WIDTH):
        self.factor = factor

    def estimate_width(self, text: str, font_size: float) -> float:
        return len(text) * font_size * self.factor


DEFAULT_MEASURER = AverageWidthMeasurer()


def estimate_width(text: str, font_size: float) -> float:
    """估算文本宽度（pt）"""
    return DEFAULT_MEASURER.estimate_width(text, font_size)


def wrap_text(
    text: str,
    font_size: float,
    max_width: float,
    measurer: ITextMeasurer | None = None,
) -> list[str]:
    """
    按单词换行

    单词之间以空格分隔；加入下一个单词后超出 max_width 且当前行非空时换行。
    单个超长单词不拆分，独占一行。空文本返回一个空行。
    """
    measurer = measurer or DEFAULT_MEASURER
    lines: list[str] = []
    current = ""

    for word in text.split(" "):
        candidate = f"{current} {word}" if current else word
        if measurer.estimate_width(candidate, font_size) > max_width and current:
            lines.append(current)
            current = word
        else:
            current = candidate

    if current or not lines:
        lines.append(current)
    return lines
