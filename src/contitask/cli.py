"""
ContiTask CLI

命令行工具，用于运行示例任务和查看配置
"""

import json
import sys
from dataclasses import asdict

import click
import yaml

from . import __version__
from .config import (
    apply_config,
    load_config_from_env,
    load_config_from_file,
    merge_configs,
)
from .core.tracing import current_tracer
from .demos import chain, counter, outer, race
from .loop import TimerLoop, run_until_complete, sync_wait


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "-c", "config_path",
    type=click.Path(exists=True),
    help="配置文件 (YAML/JSON)"
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="覆盖日志级别"
)
@click.pass_context
def cli(ctx, config_path, log_level):
    """ContiTask - 协作式任务原语"""
    config = load_config_from_file(config_path) if config_path else load_config_from_env()
    if log_level:
        config = merge_configs(config, {"log_level": log_level.upper()})
    try:
        apply_config(config)
    except ValueError as e:
        click.echo(f"配置错误: {e}", err=True)
        sys.exit(1)
    ctx.obj = config


@cli.group()
def demo():
    """运行示例任务"""
    pass


@demo.command("sum")
def demo_sum():
    """outer() 两次 await add_one() 并求和"""
    click.echo(f"outer() = {sync_wait(outer())}")


@demo.command("chain")
@click.option("--depth", "-d", type=int, default=10000, show_default=True, help="嵌套深度")
def demo_chain(depth):
    """构造深度为 N 的 await 链"""
    result = sync_wait(chain(depth))
    click.echo(f"chain({depth}) = {result}")

    tracer = current_tracer()
    if tracer:
        summary = tracer.get_trace_summary()
        click.echo(json.dumps(summary, indent=2, ensure_ascii=False))


@demo.command("generator")
@click.option("--count", "-n", type=int, default=5, show_default=True, help="产出个数")
def demo_generator(count):
    """逐个读取 co_yield 产出的值"""
    gen = counter(count)
    for value in gen:
        click.echo(f"yield: {value}")
    click.echo(f"return: {gen.result()}")


@demo.command("timer")
@click.option("--delay", type=float, default=0.1, show_default=True, help="快者的延迟（秒）")
@click.pass_obj
def demo_timer(config, delay):
    """两个定时任务竞争，输出先完成者"""
    loop = TimerLoop()
    index, label = run_until_complete(
        race(loop, delay), loop, max_idle_sleep=config.max_idle_sleep
    )
    click.echo(f"winner: #{index} ({label})")


@cli.group("config")
def config_group():
    """配置相关命令"""
    pass


@config_group.command("show")
@click.option(
    "--format", "fmt",
    type=click.Choice(["json", "yaml"]),
    default="yaml",
    help="输出格式"
)
@click.pass_obj
def config_show(config, fmt):
    """显示生效的配置"""
    data = asdict(config)
    if fmt == "json":
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
    else:
        click.echo(yaml.dump(data, allow_unicode=True, sort_keys=False))


def main():
    """CLI 入口"""
    cli()


if __name__ == "__main__":
    main()
