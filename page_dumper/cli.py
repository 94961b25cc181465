#!/usr/bin/env python3
"""
Точка входа для запуска PageDumper через командную строку.

Команды:
  dump URL  Снять офлайн-копию страницы и сохранить её в папку
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Команда dump опции:
  --out DIR           Папка для результата (default: ./out, очищается)
  --anonymize         Анонимные пути ресурсов (r/<id>.<ext>)
  --same-origin       Не сохранять ресурсы с чужих origin
  --settle-time MS    Пауза после загрузки, 2000..60000 мс
  --manifest PATH     Сохранить JSON-манифест

Коды выхода: 0 — успех, 2 — страница не загрузилась, 1 — внутренняя ошибка.

Пример:
  page-dumper dump https://example.com/game/index.html --out ./out --same-origin
"""
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from page_dumper import __version__
from page_dumper.config import DumpOptions, load_config
from page_dumper.engine import capture
from page_dumper.errors import DumpError, PageLoadError
from page_dumper.logger import init_logging
from page_dumper.output import write_manifest, write_result
from page_dumper.paths import PathPolicy

CONTEXT_SETTINGS = dict(help_option_names=["--help"])

EXIT_CAPTURE_FAILED = 1
EXIT_PAGE_LOAD_FAILED = 2


def print_error(message: str, code: int = EXIT_CAPTURE_FAILED):
    click.secho(message, fg='red', err=True)
    sys.exit(code)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='PageDumper, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
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
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд PageDumper CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('dump', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option(
    '--out', '-o', 'out_dir',
    default='./out',
    show_default=True,
    type=click.Path(file_okay=False, path_type=Path),
    help='Папка для сохранения снимка (очищается перед записью)'
)
@click.option(
    '--anonymize', '-r', is_flag=True,
    help='Анонимные пути ресурсов вместо исходной структуры'
)
@click.option(
    '--same-origin', '-s', is_flag=True,
    help='Не сохранять ресурсы с чужих origin'
)
@click.option(
    '--settle-time', 'settle_time',
    type=int,
    default=None,
    help='Пауза после загрузки страницы (мс), 2000..60000'
)
@click.option(
    '--manifest', '-m', 'manifest_path',
    default=None,
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help='Сохранить JSON-манифест в файл'
)
@click.pass_context
def dump(ctx, url, out_dir, anonymize, same_origin, settle_time, manifest_path):
    """Снять офлайн-копию страницы URL."""
    cfg = ctx.obj['config']
    overrides = cfg.options.model_dump()
    if anonymize:
        overrides['path_policy'] = PathPolicy.ANONYMIZE
    if same_origin:
        overrides['cross_origin'] = False
    if settle_time is not None:
        overrides['settle_time'] = settle_time
    try:
        options = DumpOptions(**overrides)
    except ValidationError as e:
        print_error(f'Неверные параметры: {e}')

    click.echo(f'Dumping {url}')
    try:
        result = capture(url, options, config=cfg)
    except PageLoadError as e:
        print_error(f'Страница не загрузилась: {e}', EXIT_PAGE_LOAD_FAILED)
    except DumpError as e:
        print_error(f'Ошибка при снятии копии: {e}', EXIT_CAPTURE_FAILED)

    try:
        written = write_result(result, out_dir, clean=True)
    except (OSError, ValueError) as e:
        print_error(f'Ошибка при сохранении: {e}')
    click.echo(f'Saved {len(written)} files to {out_dir} (entry: {result.entry_path})')

    if manifest_path:
        try:
            saved = write_manifest(result, manifest_path)
            click.echo(f'Manifest: {saved}')
        except OSError as e:
            print_error(f'Ошибка при сохранении манифеста: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
