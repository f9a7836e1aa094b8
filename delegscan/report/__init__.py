"""
报告输出

模块：
- reporter: 定宽表格、汇总、图例与 JSON 输出
"""

from delegscan.report.reporter import ScanReporter, format_row, format_imports, COLUMNS, LEGEND

__all__ = [
    "ScanReporter",
    "format_row",
    "format_imports",
    "COLUMNS",
    "LEGEND",
]
