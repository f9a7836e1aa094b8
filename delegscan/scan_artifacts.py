#!/usr/bin/env python3
"""
构建产物 DELEGATECALL 扫描
==========================

扫描 Foundry/Hardhat 构建目录，判断每个产物的 DELEGATECALL 是否位于
可达字节码（元数据尾部之前），并结合 ABI 与源码给出风险提示。

运行方式：
    delegscan-scan                    # 扫描 ./out，仅输出含 DELEGATECALL 的产物
    delegscan-scan out --all          # 输出全部产物
    delegscan-scan out --strict       # 仅输出 LIKELY-REACHABLE
    delegscan-scan out --debug        # 诊断信息输出到 stderr
    delegscan-scan out --json         # JSON 报告
"""

import argparse
import sys
from typing import List, Optional

from rich.console import Console

from config.settings import settings
from delegscan.contract.contract_model import ScanMode
from delegscan.contract.disassembler import CastDisassembler
from delegscan.errors import RuleTableError, ToolNotFoundError
from delegscan.logging_setup import setup_logging
from delegscan.report.reporter import ScanReporter
from delegscan.rules.rule_tables import load_rule_tables
from delegscan.scanner import ArtifactScanner

EXIT_TOOL_MISSING = 127

err_console = Console(stderr=True, highlight=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="delegscan-scan",
        description="构建产物 DELEGATECALL 可达性扫描",
    )
    parser.add_argument(
        "artifact_dir",
        nargs="?",
        default=None,
        help=f"构建产物目录（默认 {settings.artifact_dir}）"
    )
    parser.add_argument(
        "--all",
        dest="mode",
        action="store_const",
        const=ScanMode.ALL,
        help="输出全部产物，无论是否含 DELEGATECALL"
    )
    parser.add_argument(
        "--only-deleg",
        dest="mode",
        action="store_const",
        const=ScanMode.ONLY_DELEG,
        help="仅输出剥离元数据后仍含 DELEGATECALL 的产物（默认）"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="仅输出 LIKELY-REACHABLE（隐含 --only-deleg）"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="诊断信息输出到 stderr"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="以 JSON 输出结果"
    )
    parser.add_argument(
        "--source-root",
        default=None,
        help=f"源文件解析根目录（默认 {settings.source_root}）"
    )
    parser.add_argument(
        "--rules",
        default=None,
        help="覆盖内置启发式规则的 JSON 文件"
    )
    parser.set_defaults(mode=ScanMode.ONLY_DELEG)
    return parser


def resolve_mode(args: argparse.Namespace) -> ScanMode:
    if args.strict:
        return ScanMode.STRICT
    return args.mode


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)

    artifact_dir = args.artifact_dir or settings.artifact_dir
    source_root = args.source_root or settings.source_root
    mode = resolve_mode(args)

    disassembler = CastDisassembler(settings.cast_bin, timeout=settings.disassemble_timeout)
    try:
        disassembler.ensure_available()
    except ToolNotFoundError:
        err_console.print(
            f"Error: foundry '{settings.cast_bin}' not found. Install foundry (foundryup).",
            markup=False,
        )
        return EXIT_TOOL_MISSING

    try:
        rules = load_rule_tables(args.rules or settings.rules_file)
    except RuleTableError as e:
        err_console.print(f"Error: {e}", markup=False)
        return 1

    scanner = ArtifactScanner(disassembler, source_root=source_root, rules=rules, mode=mode)
    reporter = ScanReporter(console)

    if args.json:
        result = scanner.scan(artifact_dir)
        reporter.print_json(result)
        return 0

    reporter.print_header(artifact_dir)
    result = scanner.scan(artifact_dir, callback=reporter.print_record)
    reporter.print_footer(result)
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
