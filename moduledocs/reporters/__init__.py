"""
报告器层 - 终端与 JSON 输出

Rich 表格面向用户，JSON 面向脚本。
"""

from moduledocs.reporters.base import Reporter
from moduledocs.reporters.rich_reporter import RichReporter
from moduledocs.reporters.json_reporter import JsonReporter

__all__ = [
    "Reporter",
    "RichReporter",
    "JsonReporter",
]
