"""Shared fixtures for the delegscan test suite."""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
from rich.console import Console

from delegscan.contract.disassembler import Disassembler
from delegscan.contract.metadata import METADATA_MARKER
from delegscan.errors import DisassemblyError


# ── Bytecode fixtures ────────────────────────────────────────────────────────

# PUSH1 0x80 PUSH1 0x40 MSTORE
PREAMBLE = "6080604052"
# CBOR tail: marker + "1220" + 32-byte hash containing 0xf4
METADATA_TAIL = METADATA_MARKER + "1220" + "f4" * 32 + "64736f6c6343000814" + "0033"

CLEAN_RUNTIME = "0x" + PREAMBLE + "00" + METADATA_TAIL
DELEG_RUNTIME = "0x" + PREAMBLE + "f4" + "00" + METADATA_TAIL
META_ONLY_RUNTIME = CLEAN_RUNTIME


# ── Fake disassemblers ───────────────────────────────────────────────────────


class ByteDisassembler(Disassembler):
    """One mnemonic line per byte; 0xf4 renders as DELEGATECALL."""

    name = "fake"

    def __init__(self):
        self.calls: List[bytes] = []

    def disassemble(self, code: bytes) -> List[str]:
        self.calls.append(code)
        return [
            f"{offset:08x}: {'DELEGATECALL' if b == 0xF4 else 'OP_%02x' % b}"
            for offset, b in enumerate(code)
        ]


class FailingDisassembler(Disassembler):
    name = "failing"

    def disassemble(self, code: bytes) -> List[str]:
        raise DisassemblyError("boom")


class CannedDisassembler(Disassembler):
    """Returns canned output keyed by the hex of the input."""

    name = "canned"

    def __init__(self, outputs: Dict[str, List[str]]):
        self.outputs = outputs

    def disassemble(self, code: bytes) -> List[str]:
        return self.outputs.get(code.hex(), [])


@pytest.fixture
def disassembler() -> ByteDisassembler:
    return ByteDisassembler()


# ── Artifact helpers ─────────────────────────────────────────────────────────


def foundry_artifact(
    contract_name: str,
    source_path: str,
    runtime: Optional[str] = DELEG_RUNTIME,
    creation: Optional[str] = None,
    abi: Optional[List[Dict[str, Any]]] = None,
    sources: Optional[List[str]] = None,
) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "abi": abi or [],
        "metadata": {
            "settings": {"compilationTarget": {source_path: contract_name}},
            "sources": {s: {"keccak256": "0x00"} for s in (sources or [source_path])},
        },
    }
    if runtime is not None:
        data["deployedBytecode"] = {"object": runtime, "sourceMap": "", "linkReferences": {}}
    if creation is not None:
        data["bytecode"] = {"object": creation, "sourceMap": "", "linkReferences": {}}
    return data


@pytest.fixture
def write_artifact(tmp_path: Path) -> Callable[..., Path]:
    out_dir = tmp_path / "out"

    def _write(relative: str, data: Any) -> Path:
        path = out_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[str, str], Path]:
    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=200, highlight=False)


def console_text(console: Console) -> str:
    return console.file.getvalue()


# ── ABI fixtures ─────────────────────────────────────────────────────────────

UPGRADE_TO = {
    "type": "function",
    "name": "upgradeTo",
    "inputs": [{"name": "newImplementation", "type": "address"}],
    "outputs": [],
    "stateMutability": "nonpayable",
}

FALLBACK = {"type": "fallback", "stateMutability": "payable"}

OWNER_VIEW = {
    "type": "function",
    "name": "owner",
    "inputs": [],
    "outputs": [{"name": "", "type": "address"}],
    "stateMutability": "view",
}

PROXY_SOURCE = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.20;

import "./lib/Forwarder.sol";

contract Proxy is Forwarder {
    address public implementation;
}
"""

FORWARDER_SOURCE = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.20;

abstract contract Forwarder {
    function _forward(address target, bytes memory data) internal {
        (bool ok, ) = target.delegatecall(data);
        require(ok);
    }
}
"""
