"""Command line interface for payroll text exports and balance reports."""

from __future__ import annotations

import argparse
from datetime import date, datetime
from pathlib import Path
from typing import List

from loguru import logger

from . import assembler, balance, config, loader, parser as txt_parser, reports


def _parse_day(text: str) -> date:
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Data inválida '{text}'. Utilize AAAA-MM-DD.") from exc


def _ensure_input_file(path: Path, *, description: str, parser: argparse.ArgumentParser) -> Path:
    if not path.exists() or not path.is_file():
        parser.error(f"Arquivo {description} não encontrado: {path}")
    return path


def build_argument_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, help="Arquivo YAML de configuração.")

    parser = argparse.ArgumentParser(description="Exportação de folha em TXT e saldo de horas")
    commands = parser.add_subparsers(dest="command", required=True)

    export = commands.add_parser(
        "exportar", parents=[common], help="Gera o arquivo TXT de acordo com um layout."
    )
    export.add_argument("--layout", required=True, help="Arquivo YAML do layout ou nome de um layout configurado.")
    export.add_argument("--lancamentos", required=True, type=Path, help="Planilha (CSV/XLSX) de lançamentos.")
    export.add_argument("--inicio", type=_parse_day, help="Data inicial (AAAA-MM-DD).")
    export.add_argument("--fim", type=_parse_day, help="Data final (AAAA-MM-DD).")
    export.add_argument("--saida", type=Path, help="Caminho do arquivo TXT gerado.")

    saldos = commands.add_parser("saldos", parents=[common], help="Calcula o saldo de extras e faltas de um arquivo TXT.")
    saldos.add_argument("--arquivo", required=True, type=Path, help="Arquivo TXT de eventos.")
    saldos.add_argument("--tabela", help="Tabela de códigos de eventos a utilizar.")
    saldos.add_argument("--excel", type=Path, help="Caminho do relatório Excel a ser gerado.")
    return parser


def _load_layout(reference: str, settings: config.AppConfig):
    path = Path(reference)
    if path.suffix.lower() in {".yaml", ".yml"} and path.is_file():
        return config.load_layout(path)
    return settings.layout(reference)


def _run_export(args: argparse.Namespace, settings: config.AppConfig, parser: argparse.ArgumentParser) -> int:
    launches_path = _ensure_input_file(args.lancamentos, description="de lançamentos", parser=parser)
    layout = _load_layout(args.layout, settings)
    launches = loader.load_launches(launches_path)
    try:
        result = assembler.build_export(layout, launches, start=args.inicio, end=args.fim)
    except assembler.EmptyResultSet as error:
        print(error)
        return 1

    output_path: Path = args.saida or Path(assembler.export_file_name(layout, args.inicio, args.fim))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(result.text, encoding="utf-8")
    logger.info(f"{len(result.lines)} linhas gravadas em {output_path} ({len(result.warnings)} avisos).")
    return 0


def _run_balances(args: argparse.Namespace, settings: config.AppConfig, parser: argparse.ArgumentParser) -> int:
    text_path = _ensure_input_file(args.arquivo, description="de eventos", parser=parser)
    table = settings.balance.table(args.tabela)
    parsed = txt_parser.parse_txt(loader.read_text_file(text_path))
    results = balance.reconcile(parsed.events, table)
    print(reports.render_results(results, parsed.malformed))
    if args.excel:
        args.excel.parent.mkdir(parents=True, exist_ok=True)
        reports.write_excel_report(results, args.excel, parsed.malformed)
        logger.info(f"Relatório gravado em {args.excel}.")
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    try:
        settings = config.load_config(args.config)
        config.setup_logging(settings.logging)
        if args.command == "exportar":
            return _run_export(args, settings, parser)
        return _run_balances(args, settings, parser)
    except config.ConfigError as error:
        parser.error(str(error))
    except loader.DataValidationError as error:
        parser.error(str(error))
    except OSError as error:
        parser.error(f"Falha ao gravar o arquivo: {error}")

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
