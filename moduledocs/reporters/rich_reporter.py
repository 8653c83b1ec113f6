"""
Rich 报告器 - 终端彩色输出

以表格列出选中的文档，详细模式下附带规划器的决策说明；
命令帮助以面板和表格展示。
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from moduledocs.documents.models import DocumentKind, DocumentSource, SelectionResult
from moduledocs.help.models import CommandHelpModel


KIND_ICONS = {
    DocumentKind.STANDARD: "📄",
    DocumentKind.SCRIPT: "📜",
    DocumentKind.SUPPLEMENTAL_DOC: "📚",
    DocumentKind.FILE: "📎",
}


class RichReporter:
    """Rich 终端报告器"""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    # ============================================================
    # 文档选择计划
    # ============================================================

    def report_selection(self, result: SelectionResult, target: str, verbose: bool = False) -> None:
        """输出选中的文档，详细模式下输出决策说明"""
        self.console.print()
        self.console.print(f"[bold cyan]Documentation plan[/bold cyan] [dim]{target}[/dim]")
        self.console.print()

        if not result.items:
            self.console.print("[yellow]No documents found.[/yellow]")
        else:
            table = Table(show_header=True, header_style="bold cyan", box=None)
            table.add_column("#", justify="right", style="dim")
            table.add_column("Title", style="bold")
            table.add_column("Kind")
            table.add_column("Source")
            table.add_column("File", style="dim")
            table.add_column("Lines", justify="right")

            for index, item in enumerate(result.items, start=1):
                source = "[magenta]remote[/magenta]" if item.source is DocumentSource.REMOTE else "[green]local[/green]"
                table.add_row(
                    str(index),
                    item.title,
                    f"{KIND_ICONS.get(item.kind, '')} {item.kind.value}",
                    source,
                    item.file_name or "",
                    str(len(item.content.splitlines())),
                )
            self.console.print(table)

        if verbose and result.notes:
            self.console.print()
            self.console.print("[bold]◆ Decisions[/bold]")
            for note in result.notes:
                self.console.print(f"  [dim]{note.key}: {note.message}[/dim]")

        self.console.print()
        summary = f"{len(result.items)} document(s)"
        if result.used_remote:
            summary += ", remote repository used"
        self.console.print(f"[dim]{summary}[/dim]")

    # ============================================================
    # 命令帮助
    # ============================================================

    def report_help(self, model: CommandHelpModel) -> None:
        """输出解析后的命令帮助"""
        content = Text()
        content.append(f"{model.name or '(unnamed)'}\n", style="bold")
        if model.synopsis:
            content.append(f"{model.synopsis}\n", style="dim")
        self.console.print(Panel(content, title="[bold]Command[/bold]", border_style="cyan"))

        if model.description:
            self.console.print()
            self.console.print(model.description)

        if model.syntax:
            self.console.print()
            self.console.print("[bold]◆ Syntax[/bold]")
            for syntax in model.syntax:
                params = " ".join(
                    f"-{p.name}" if p.required else f"[-{p.name}]" for p in syntax.parameters
                )
                self.console.print(f"  {syntax.name} {params}".rstrip(), markup=False)

        if model.parameters:
            self.console.print()
            table = Table(show_header=True, header_style="bold cyan", box=None, title="Parameters")
            table.add_column("Name", style="bold")
            table.add_column("Type")
            table.add_column("Required")
            table.add_column("Position")
            table.add_column("Description", style="dim")
            for param in model.parameters:
                table.add_row(
                    param.name,
                    param.type,
                    _flag(param.required),
                    param.position or "",
                    (param.description or "").split("\n")[0],
                )
            self.console.print(table)

        for example in model.examples:
            self.console.print()
            self.console.print(Panel(
                Text(example.code or "(no code)"),
                title=f"[bold]{example.title}[/bold]",
                subtitle=f"[dim]{example.mode}[/dim]",
                border_style="green",
            ))
            if example.remarks:
                self.console.print(example.remarks, style="dim", markup=False)

        for label, types in (("Inputs", model.inputs), ("Outputs", model.outputs)):
            if types:
                self.console.print()
                self.console.print(f"[bold]◆ {label}[/bold]")
                for entry in types:
                    self.console.print(f"  {entry.type_name}", markup=False)

        if model.notes:
            self.console.print()
            self.console.print("[bold]◆ Notes[/bold]")
            self.console.print(model.notes, markup=False)

        if model.related_links:
            self.console.print()
            self.console.print("[bold]◆ Related links[/bold]")
            for link in model.related_links:
                line = f"  {link.title} {link.uri}" if link.uri and link.uri != link.title else f"  {link.title}"
                self.console.print(line, markup=False)


def _flag(value: bool | None) -> str:
    if value is None:
        return "[dim]?[/dim]"
    return "[green]yes[/green]" if value else "no"
