# src/service_providers/presentation/cli/main.py
"""
service-providers 命令行工具：在不建立任何连接的前提下体检配置文件。
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from service_providers.exceptions import ServiceProviderError
from service_providers.observability.logging_config import setup_logging
from service_providers.providers.configuration import load_configuration_file
from service_providers.providers.named_strings import (
    lookup_named_string,
    named_string_family,
)

from ._inspect import SHOWABLE_FAMILIES, resolve_record, run_checks

app = typer.Typer(
    name="service-providers",
    help="🔧 服务提供者配置体检工具。",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

STATUS_STYLES = {
    "ok": "[green]✅ ok[/green]",
    "unconfigured": "[dim]– 未配置[/dim]",
    "error": "[bold red]❌ error[/bold red]",
}

ConfigFileArg = Annotated[
    Path, typer.Argument(help="配置文件（JSON / YAML / TOML）。", show_default=False)
]


def _load(config_file: Path) -> Any:
    try:
        return load_configuration_file(config_file)
    except ServiceProviderError as e:
        console.print(f"[bold red]❌ {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="输出调试日志。")] = False,
    log_format: Annotated[str, typer.Option("--log-format", help="console 或 json。")] = "console",
) -> None:
    setup_logging(
        log_level="DEBUG" if verbose else "WARNING",
        log_format="json" if log_format == "json" else "console",
        service="service-providers-cli",
    )


@app.command("check")
def check(config_file: ConfigFileArg) -> None:
    """解析每个资源族（不建立连接），列出配置问题。"""
    config = _load(config_file)
    results = run_checks(config)

    table = Table(title=f"配置体检：{config_file}")
    table.add_column("资源族", style="cyan")
    table.add_column("目标")
    table.add_column("状态")
    table.add_column("详情", overflow="fold")
    for result in results:
        table.add_row(
            escape(result.family),
            escape(result.target),
            STATUS_STYLES[result.status],
            escape(result.detail),
        )
    console.print(table)

    failures = [r for r in results if r.status == "error"]
    if failures:
        console.print(f"[bold red]发现 {len(failures)} 处配置错误。[/bold red]")
        raise typer.Exit(code=1)
    console.print("[green]配置检查通过。[/green]")


@app.command("show")
def show(
    family: Annotated[str, typer.Argument(help=f"资源族：{' / '.join(SHOWABLE_FAMILIES)}。")],
    config_file: ConfigFileArg,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="命名实例（数据库多连接）。")] = None,
) -> None:
    """以 JSON 输出规范化后的配置记录，密钥已屏蔽。"""
    config = _load(config_file)
    try:
        record = resolve_record(config, family, name)
    except ServiceProviderError as e:
        console.print(f"[bold red]❌ {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e

    label = f"{family}[{name}]" if name else family
    console.print(
        Panel(
            Syntax(json.dumps(record, indent=2, ensure_ascii=False), "json"),
            title=f"[green]{escape(label)}[/green]",
            border_style="green",
        )
    )


@app.command("lookup")
def lookup(
    collection: Annotated[str, typer.Argument(help="字符串表名称，例如 paths、urls。")],
    key: Annotated[str, typer.Argument(help="要查找的键。")],
    config_file: ConfigFileArg,
) -> None:
    """输出命名字符串表中的某个值。"""
    config = _load(config_file)
    try:
        value = lookup_named_string(config, named_string_family(collection), key)
    except ServiceProviderError as e:
        console.print(f"[bold red]❌ {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e
    typer.echo(value)


if __name__ == "__main__":
    app()
