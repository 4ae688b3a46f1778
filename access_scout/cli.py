# === FILE: access_scout/cli.py ===
"""
Точка входа для запуска сканера AccessScout через командную строку.

Команды:
  scan URL  Проанализировать сайт и вывести/сохранить JSON-результат
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования (e.g. "%(asctime)s %(levelname)s %(message)s")

Команда scan опции:
  --limit INT         Макс. число страниц для обхода (override crawl.max_pages)
  --json PATH         Сохранить JSON-отчёт в файл
  --pretty            Преформатировать JSON-вывод (отступ 2)
  --scan-timeout SEC  Таймаут всего сканирования (секунд)

Дополнительно:
  --version, -v       Показать версию AccessScout

Пример:
  access-scout scan example.gov --json report.json --limit 20
"""
import asyncio
import sys
from pathlib import Path

import click

from access_scout import __version__
from access_scout.config import ScannerConfig, load_config
from access_scout.engine import start_scan
from access_scout.errors import CrawlExhausted, InvalidInput
from access_scout.logger import DEFAULT_FORMAT, init_logging
from access_scout.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])
DEFAULT_CONFIG = Path("configs/default.yaml")


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='AccessScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд AccessScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        if config_path is None and not DEFAULT_CONFIG.exists():
            cfg = ScannerConfig()
        else:
            cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('scan', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option(
    '--limit', '-l', 'limit',
    type=click.IntRange(min=1),
    default=None,
    help='Макс. число страниц для обхода (override crawl.max_pages)'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.option(
    '--scan-timeout', 'scan_timeout',
    type=float,
    default=None,
    help='Таймаут всего сканирования (секунд)'
)
@click.pass_context
def scan(ctx, url, limit, json_output, pretty, scan_timeout):
    """Проанализировать сайт URL и вывести результат."""
    cfg = ctx.obj['config'].with_overrides(max_pages=limit)
    try:
        if scan_timeout:
            result = asyncio.run(
                asyncio.wait_for(start_scan(cfg, url), timeout=scan_timeout)
            )
        else:
            result = asyncio.run(start_scan(cfg, url))
    except InvalidInput as e:
        print_error(f'Некорректный адрес: {e}')
    except CrawlExhausted as e:
        print_error(str(e))
    except asyncio.TimeoutError:
        print_error(f'Сканирование не завершено за {scan_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при сканировании: {e}')

    # Если не сохраняем в файл, печатаем в stdout
    if not json_output:
        click.echo(result.json(pretty=pretty))
        return

    try:
        saved_json = render_json(result, json_output, pretty=pretty)
        click.echo(f'JSON report: {saved_json}')
    except Exception as e:
        print_error(f'Ошибка при сохранении JSON: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
