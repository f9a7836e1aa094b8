#!/usr/bin/env python3
"""
单合约 DELEGATECALL 检查
========================

通过 `forge inspect` 获取合约运行时字节码，剥离元数据尾部后反汇编，
输出 DELEGATECALL 所在行及数量。若可达代码中没有、但完整字节码中有，
提示该命中仅位于元数据尾部。

运行方式：
    delegscan-check src/factories/ComponentBeaconFactory.sol ComponentBeaconFactory
    delegscan-check --show 5 src/Proxy.sol Proxy     # 每处命中前后各输出5行
"""

import argparse
import shutil
import subprocess
import sys
from typing import List, Optional

from rich.console import Console

from config.settings import settings
from delegscan.contract.bytecode_evidence import count_delegatecall_lines, delegatecall_line_numbers
from delegscan.contract.disassembler import CastDisassembler, Disassembler
from delegscan.contract.metadata import Bytecode, normalize_hex
from delegscan.errors import BytecodeDecodeError, DelegScanError, DisassemblyError, ToolNotFoundError
from delegscan.logging_setup import setup_logging

EXIT_TOOL_MISSING = 127

err_console = Console(stderr=True, highlight=False)


def inspect_deployed_bytecode(target: str, forge_bin: str = "forge", timeout: Optional[float] = None) -> str:
    """`forge inspect <path>:<Contract> deployedBytecode`

    Raises:
        ToolNotFoundError: forge 不可用
        DelegScanError: forge 返回非零状态或超时
    """
    try:
        result = subprocess.run(
            [forge_bin, "inspect", target, "deployedBytecode"],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise ToolNotFoundError(forge_bin) from e
    except subprocess.TimeoutExpired as e:
        raise DelegScanError(f"forge inspect {target} timed out after {timeout}s") from e

    if result.returncode != 0:
        stderr = result.stderr.strip().splitlines()
        raise DelegScanError(f"forge inspect {target} failed: {stderr[-1] if stderr else result.returncode}")

    return normalize_hex(result.stdout)


def context_blocks(lines: List[str], matches: List[int], show: int) -> List[str]:
    """每处命中前后各 show 行（行号 1 起）"""
    output = []
    for i, line_no in enumerate(matches, start=1):
        output.append(f"---- match {i} ----")
        start = max(1, line_no - show)
        end = line_no + show
        output.extend(lines[start - 1:end])
    return output


def disassemble_hex(disassembler: Disassembler, bytecode: Bytecode) -> List[str]:
    if bytecode.is_empty:
        return []
    return disassembler.disassemble(bytecode.to_bytes())


def report(
    bytecode_hex: str,
    disassembler: Disassembler,
    console: Console,
    show: int = 0,
):
    """输出可达代码中的 DELEGATECALL 及计数

    Raises:
        DisassemblyError / BytecodeDecodeError: 可达部分无法反汇编
    """
    full = Bytecode(bytecode_hex)
    stripped_lines = disassemble_hex(disassembler, full.stripped())

    def out(text: str = ""):
        console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)

    out("cast disassemble (reachable code; metadata stripped):")
    matches = delegatecall_line_numbers(stripped_lines)
    if show <= 0:
        for line_no in matches:
            out(f"{line_no}:{stripped_lines[line_no - 1]}")
    else:
        for text in context_blocks(stripped_lines, matches, show):
            out(text)

    reachable_count = len(matches)
    out(f"DELEGATECALL count (reachable): {reachable_count}")

    if reachable_count == 0:
        try:
            full_count = count_delegatecall_lines(disassemble_hex(disassembler, full))
        except (DisassemblyError, BytecodeDecodeError) as e:
            err_console.print(f"warning: full bytecode disassembly failed: {e}", markup=False)
            full_count = 0
        if full_count > 0:
            out("Note: DELEGATECALL appears only in the metadata tail (unreachable).")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="delegscan-check",
        description="检查单个合约运行时字节码中的 DELEGATECALL",
    )
    parser.add_argument("solidity_path", help="Solidity 源文件路径")
    parser.add_argument("contract_name", help="合约名")
    parser.add_argument(
        "--show",
        type=int,
        default=0,
        metavar="N",
        help="输出每处命中前后 N 行反汇编（默认只输出行号）"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="诊断信息输出到 stderr"
    )
    return parser


def main(
    argv: Optional[List[str]] = None,
    console: Optional[Console] = None,
    disassembler: Optional[Disassembler] = None,
) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)
    console = console or Console(highlight=False, soft_wrap=True)

    if shutil.which(settings.forge_bin) is None:
        err_console.print(f"missing: {settings.forge_bin}", markup=False)
        return EXIT_TOOL_MISSING

    if disassembler is None:
        disassembler = CastDisassembler(settings.cast_bin, timeout=settings.disassemble_timeout)
        if not disassembler.is_available():
            err_console.print(f"missing: {settings.cast_bin}", markup=False)
            return EXIT_TOOL_MISSING

    target = f"{args.solidity_path}:{args.contract_name}"

    try:
        bytecode_hex = inspect_deployed_bytecode(target, settings.forge_bin, timeout=settings.forge_timeout)
        report(bytecode_hex, disassembler, console, show=args.show)
    except ToolNotFoundError as e:
        err_console.print(str(e), markup=False)
        return EXIT_TOOL_MISSING
    except DelegScanError as e:
        err_console.print(f"Error: {e}", markup=False)
        return 1

    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
