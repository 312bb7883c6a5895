#!/usr/bin/env python3
"""
Reminder Bot CLI

命令行工具
"""

import asyncio
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from reminder_bot import __version__
from reminder_bot.config import Config, LoggingConfig
from reminder_bot.errors import PersistenceError, StartupError
from reminder_bot.reminders import ReminderStore

console = Console()


def setup_logging(config: LoggingConfig, verbose: bool = False):
    """配置日志输出"""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else config.level)
    if config.file:
        logger.add(
            config.file,
            level="DEBUG" if verbose else config.level,
            rotation=config.rotation,
            retention=config.retention,
            encoding="utf-8",
        )


@click.group()
@click.version_option(version=__version__, prog_name="reminder-bot")
@click.option("--config", "-c", help="配置文件路径")
@click.option("--verbose", "-v", is_flag=True, help="详细输出")
@click.pass_context
def cli(ctx, config, verbose):
    """Reminder Bot - Telegram 定时提醒"""
    load_dotenv()

    ctx.ensure_object(dict)
    ctx.obj["config"] = Config.load(config)
    setup_logging(ctx.obj["config"].logging, verbose)


@cli.command()
@click.pass_context
def start(ctx):
    """启动 Reminder Bot"""
    from reminder_bot.bot import ReminderBot

    config = ctx.obj["config"]

    console.print(Panel.fit(
        f"🤖 Reminder Bot v{__version__}\n"
        f"Store: {config.store.path}",
        title="启动",
        border_style="green"
    ))

    try:
        bot = ReminderBot(config=config)
        asyncio.run(bot.run())
    except KeyboardInterrupt:
        console.print("\n[yellow]已停止[/yellow]")
    except (StartupError, PersistenceError) as e:
        logger.error(f"Startup failed: {e}")
        console.print(f"[red]错误: {e}[/red]")
        sys.exit(1)


@cli.command()
def init():
    """初始化配置"""
    config_path = Path("config/config.yaml")

    if config_path.exists():
        console.print(f"[yellow]配置文件已存在: {config_path}[/yellow]")
        if not click.confirm("是否覆盖?"):
            return

    Config().save(str(config_path))

    console.print(f"[green]✓ 配置文件已创建: {config_path}[/green]")
    console.print("[dim]在 .env 中设置 TELEGRAM_BOT_TOKEN 后运行: reminder-bot start[/dim]")


@cli.command(name="list")
@click.option("--chat", type=int, default=None, help="只显示指定聊天的提醒")
@click.pass_context
def list_reminders(ctx, chat):
    """列出已保存的提醒"""
    config = ctx.obj["config"]
    store = ReminderStore(config.store.path, on_corrupt_store=config.store.on_corrupt_store)
    try:
        store.load()
    except PersistenceError as e:
        console.print(f"[red]错误: {e}[/red]")
        sys.exit(1)

    reminders = store.get_reminders() if chat is None else store.get_reminders_by_chat(chat)
    if not reminders:
        console.print("[dim]没有提醒[/dim]")
        return

    table = Table(title=f"Reminders ({config.store.path})")
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Next")
    table.add_column("Frequency")
    table.add_column("Category")
    table.add_column("Chat", justify="right")

    for r in reminders:
        table.add_row(
            r.id[:8],
            r.title,
            r.date.strftime("%Y-%m-%d %H:%M"),
            r.frequency.value,
            r.category.value,
            str(r.chat_id),
        )

    console.print(table)
    summary = ", ".join(f"{k}: {v}" for k, v in sorted(store.stats().items()))
    console.print(f"[dim]{len(reminders)} shown ({summary})[/dim]")


def main():
    """主入口"""
    cli()


if __name__ == "__main__":
    main()
