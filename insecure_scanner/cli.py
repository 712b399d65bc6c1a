# === FILE: insecure_scanner/cli.py ===
"""
Точка входа для запуска сканера InsecureScanner через командную строку.

Обходит сайт начиная с URL, печатает каждую найденную пару
``<страница>: <небезопасный ресурс>`` сразу по мере обнаружения,
а в конце список всех проанализированных страниц.

Опции:
  --config PATH         Путь к YAML/JSON-конфигу (configs/default.yaml, если есть)
  --concurrency INT     Макс. число одновременных загрузок (0 = без ограничения)
  --completion MODE     inflight | idle
  --idle-window SEC     Период окна простоя для режима idle
  --timeout SEC         Таймаут одного запроса
  --retries INT         Повторы при 5xx/429
  --user-agent STR      Заголовок User-Agent
  --json PATH           Сохранить JSON-отчёт в файл
  --html PATH           Сохранить HTML-отчёт в файл
  --scan-timeout SEC    Таймаут всего обхода
  --log-level LEVEL     Уровень логирования
  --log-file PATH       Файл для логов
  --version, -v         Показать версию

Пример:
  insecure-scanner https://example.com --json report.json
"""
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, NoReturn

import click
from pydantic import ValidationError

from insecure_scanner import __version__
from insecure_scanner.aggregator import aggregate_results
from insecure_scanner.config import CrawlerConfig, load_config
from insecure_scanner.crawler.models import Finding
from insecure_scanner.logger import init_logging
from insecure_scanner.report.html_report import render_html
from insecure_scanner.report.json_report import render_json
from insecure_scanner.scanner import start_scan

CONTEXT_SETTINGS = dict(help_option_names=["--help"])
SEPARATOR = "-----"


def print_error(message: str, code: int = 1) -> NoReturn:
    click.secho(message, fg='red', err=True)
    sys.exit(code)


def print_section(title: str) -> None:
    click.echo(SEPARATOR)
    click.echo(title)
    click.echo(SEPARATOR)


def print_finding(finding: Finding) -> None:
    click.echo(str(finding))


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='InsecureScanner, version %(version)s')
@click.argument('url')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--concurrency', 'concurrency',
    type=click.IntRange(min=0),
    default=None,
    help='Макс. число одновременных загрузок (0 = без ограничения).'
)
@click.option(
    '--completion', 'completion',
    type=click.Choice(['inflight', 'idle']),
    default=None,
    help='Как определять конец обхода.'
)
@click.option(
    '--idle-window', 'idle_window',
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help='Период окна простоя, секунд (режим idle).'
)
@click.option(
    '--timeout', 'timeout',
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help='Таймаут одного запроса, секунд.'
)
@click.option(
    '--retries', 'retry_times',
    type=click.IntRange(min=0),
    default=None,
    help='Число повторов при 5xx/429.'
)
@click.option('--user-agent', 'user_agent', default=None, help='Заголовок User-Agent.')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--scan-timeout', 'scan_timeout',
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help='Таймаут всего обхода (секунд)'
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
    help='Путь к файлу логов (только stderr, если не указан)'
)
def cli(url, config_path, concurrency, completion, idle_window, timeout, retry_times,
        user_agent, json_output, html_output, scan_timeout, log_level, log_file):
    """Найти ресурсы, загружаемые по HTTP, на страницах сайта URL."""
    init_logging(level=log_level, log_file=str(log_file) if log_file else None)

    overrides: Dict[str, Any] = {
        'completion': completion,
        'idle_window': idle_window,
        'timeout': timeout,
        'retry_times': retry_times,
        'user_agent': user_agent,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if concurrency is not None:
        overrides['max_concurrency'] = concurrency or None

    try:
        cfg = load_config(config_path)
        # command-line values are validated like file values
        cfg = CrawlerConfig.model_validate({**cfg.model_dump(), **overrides})
    except (OSError, ValueError, TypeError, ValidationError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')

    seed = url.removesuffix('/')
    print_section('Insecure resources (page: resource):')
    try:
        scan = start_scan(cfg, seed, on_finding=print_finding)
        if scan_timeout is not None:
            report = asyncio.run(asyncio.wait_for(scan, timeout=scan_timeout))
        else:
            report = asyncio.run(scan)
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {scan_timeout} секунд')
    except KeyboardInterrupt:
        print_error('Обход прерван', code=130)

    print_section('Analyzed pages:')
    for page in report.pages:
        click.echo(page)

    if json_output or html_output:
        scan_report = aggregate_results(report)
        try:
            if json_output:
                click.echo(f'JSON report: {render_json(scan_report, json_output)}', err=True)
            if html_output:
                click.echo(f'HTML report: {render_html(scan_report, html_output)}', err=True)
        except OSError as e:
            print_error(f'Ошибка при сохранении отчёта: {e}')


if __name__ == "__main__":
    cli()
