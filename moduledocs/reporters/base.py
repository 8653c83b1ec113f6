"""
报告器基类 - 定义报告器接口
"""

from typing import Protocol

from moduledocs.documents.models import SelectionResult
from moduledocs.help.models import CommandHelpModel


class Reporter(Protocol):
    """报告器协议"""

    def report_selection(self, result: SelectionResult, target: str, verbose: bool = False) -> None:
        """输出文档选择计划"""
        ...

    def report_help(self, model: CommandHelpModel) -> None:
        """输出解析后的命令帮助"""
        ...
