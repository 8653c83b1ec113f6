"""
CLI 入口模块 - 使用 Typer 构建命令行界面

命令：
1. plan：模块会交付哪些文档，以及原因
2. help：解析单个命令的帮助（实时获取或读取保存的输出）
3. token-set / token-remove：管理已保存的仓库令牌
4. version
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from moduledocs.config import ConfigError, load_delivery_options, resolve_layout
from moduledocs.documents import MergeMode, SelectionRequest, plan_documents
from moduledocs.help import (
    ExamplesMode,
    HelpContentParser,
    HelpSourceConfig,
    PowerShellHelpSource,
    load_command_help,
)
from moduledocs.repo import TokenStore, create_repo_client
from moduledocs.reporters import JsonReporter, RichReporter

# 创建 Typer 应用实例
app = typer.Typer(
    name="moduledocs",
    help="moduledocs: Resolve module documentation and parse command help.",
    add_completion=False,
)

# Rich Console 用于输出
console = Console()


def _setup_logging(verbose: bool) -> None:
    """配置日志级别"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
    )


def _reporter(format: str):
    """按输出格式选择报告器"""
    if format == "json":
        return JsonReporter()
    if format != "rich":
        console.print(f"[red]Error:[/red] Unknown format: {format}")
        raise typer.Exit(1)
    return RichReporter(console)


@app.command()
def plan(
    target: str = typer.Argument(".", help="Module root folder"),
    readme: bool = typer.Option(False, "--readme", help="Include the README"),
    changelog: bool = typer.Option(False, "--changelog", help="Include the CHANGELOG"),
    license: bool = typer.Option(False, "--license", help="Include the LICENSE"),
    intro: bool = typer.Option(False, "--intro", help="Include the introduction"),
    upgrade: bool = typer.Option(False, "--upgrade", help="Include the upgrade notes"),
    all_docs: bool = typer.Option(False, "--all", help="Introduction, README, CHANGELOG and LICENSE"),
    single_file: Optional[str] = typer.Option(None, "--file", help="A specific file to include"),
    mode: str = typer.Option("PreferLocal", "--mode", "-m", help="PreferLocal, PreferRemote or All"),
    show_duplicates: bool = typer.Option(False, "--show-duplicates", help="Keep identical copies"),
    online: bool = typer.Option(False, "--online", help="Fetch documents from the repository"),
    no_local: bool = typer.Option(False, "--no-local", help="Ignore local documents when online"),
    prefer_internals: bool = typer.Option(False, "--prefer-internals", help="Prefer the Internals folder"),
    repo_url: Optional[str] = typer.Option(None, "--repo-url", help="Repository URL (defaults to project_uri)"),
    branch: Optional[str] = typer.Option(None, "--branch", "-b", help="Repository branch"),
    token: Optional[str] = typer.Option(None, "--token", help="Repository access token"),
    repo_path: Optional[list[str]] = typer.Option(None, "--repo-path", help="Remote docs folder (repeatable)"),
    title_name: Optional[str] = typer.Option(None, "--title-name", help="Title prefix (module name)"),
    title_version: Optional[str] = typer.Option(None, "--title-version", help="Title prefix (version)"),
    config: Optional[Path] = typer.Option(None, "--config", help="Delivery configuration file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show decisions and debug logging"),
    format: str = typer.Option("rich", "--format", "-f", help="Output format: rich (default) or json"),
) -> None:
    """
    Show which documents would be delivered for a module.

    Examples:
        moduledocs plan ./MyModule
        moduledocs plan ./MyModule --online --mode All -v
        moduledocs plan . --readme --format json
    """
    _setup_logging(verbose)
    root = Path(target).resolve()

    if not root.exists():
        console.print(f"[red]Error:[/red] Path does not exist: {target}")
        raise typer.Exit(1)
    if not root.is_dir():
        console.print(f"[red]Error:[/red] Path is not a directory: {target}")
        raise typer.Exit(1)

    try:
        merge_mode = MergeMode.parse(mode)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    try:
        options = load_delivery_options(root, config)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    layout = resolve_layout(root, options)
    reporter = _reporter(format)

    client = None
    url = repo_url or options.project_uri
    if url:
        client = create_repo_client(url, token=token)
        if verbose:
            console.print(f"[dim]Repository: {url}[/dim]")

    request = SelectionRequest(
        root=layout.root,
        secondary=layout.secondary,
        remote=client,
        online=online,
        branch=branch,
        repository_paths=tuple(repo_path or ()),
        mode=merge_mode,
        show_duplicates=show_duplicates,
        include_local=not no_local,
        prefer_secondary=prefer_internals,
        readme=readme,
        changelog=changelog,
        license=license,
        intro=intro,
        upgrade=upgrade,
        all=all_docs,
        single_file=single_file,
        title_name=title_name,
        title_version=title_version,
        delivery=options,
    )

    try:
        result = plan_documents(request)
    finally:
        if client is not None:
            client.close()

    reporter.report_selection(result, str(root), verbose=verbose)


@app.command(name="help")
def help_command(
    command: str = typer.Argument(..., help="Command name"),
    text_file: Optional[Path] = typer.Option(None, "--text-file", help="Saved Get-Help text dump"),
    json_file: Optional[Path] = typer.Option(None, "--json-file", help="Saved structured help (JSON)"),
    examples: str = typer.Option("auto", "--examples", help="Examples source: auto, raw or structured"),
    shell: str = typer.Option("pwsh", "--shell", help="PowerShell executable"),
    timeout: int = typer.Option(5, "--timeout", help="Seconds allowed per help lookup"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    format: str = typer.Option("rich", "--format", "-f", help="Output format: rich (default) or json"),
) -> None:
    """
    Parse the help of a command.

    Without --text-file / --json-file the help is fetched from PowerShell.

    Examples:
        moduledocs help Get-Process
        moduledocs help Get-Thing --text-file get-thing.txt --format json
    """
    _setup_logging(verbose)

    try:
        examples_mode = ExamplesMode.parse(examples)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    reporter = _reporter(format)
    parser = HelpContentParser()

    if text_file is not None or json_file is not None:
        try:
            raw = text_file.read_text(encoding="utf-8") if text_file is not None else None
            snapshot = json.loads(json_file.read_text(encoding="utf-8")) if json_file is not None else None
        except (OSError, ValueError) as e:
            console.print(f"[red]Error:[/red] Failed to read help input: {e}")
            raise typer.Exit(1)
        model = parser.parse(snapshot, raw_dump=raw, examples_mode=examples_mode, fallback_name=command)
    else:
        source = PowerShellHelpSource(HelpSourceConfig(shell=shell, timeout=timeout))
        model = load_command_help(command, source, parser, examples_mode)

    if model is None:
        console.print(f"[yellow]Warning:[/yellow] No help available for {command}")
        raise typer.Exit(1)

    reporter.report_help(model)


@app.command(name="token-set")
def token_set(
    host: str = typer.Argument(..., help="Repository host (github.com, dev.azure.com...)"),
    token: str = typer.Option(..., "--token", prompt=True, hide_input=True, help="Access token"),
) -> None:
    """Store the access token of a repository host."""
    store = TokenStore()
    store.set_token(host, token)
    console.print(f"[green]Stored token for {host.lower()}[/green] [dim]({store.path})[/dim]")


@app.command(name="token-remove")
def token_remove(
    host: str = typer.Argument(..., help="Repository host"),
) -> None:
    """Forget the stored access token of a repository host."""
    if TokenStore().remove_token(host):
        console.print(f"[green]Removed token for {host.lower()}[/green]")
    else:
        console.print(f"[yellow]Warning:[/yellow] No token stored for {host.lower()}")


@app.command()
def version() -> None:
    """Show the version of moduledocs."""
    from moduledocs import __version__
    console.print(f"[bold]moduledocs[/bold] v{__version__}")


if __name__ == "__main__":
    app()
