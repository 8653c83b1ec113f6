"""
JSON 报告器 - 输出机器可读的 JSON 格式
"""

import json
import sys
from typing import Any, TextIO

from moduledocs.documents.models import SelectionResult
from moduledocs.help.models import CommandHelpModel


class JsonReporter:
    """JSON 报告器"""

    def __init__(self, output: TextIO | None = None):
        self.output = output or sys.stdout

    def _emit(self, data: Any) -> None:
        print(json.dumps(data, indent=2, ensure_ascii=False), file=self.output)

    def report_selection(self, result: SelectionResult, target: str, verbose: bool = False) -> None:
        """输出选择计划（始终包含决策说明）"""
        data = {"target": target}
        data.update(result.to_dict())
        data["summary"] = {
            "total_items": len(result.items),
            "remote_items": sum(1 for item in result.items if item.source.value == "remote"),
            "notes": len(result.notes),
        }
        self._emit(data)

    def report_help(self, model: CommandHelpModel) -> None:
        """输出解析后的帮助模型"""
        self._emit(model.to_dict())
