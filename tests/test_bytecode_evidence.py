"""Tests for bytecode evidence extraction."""

from __future__ import annotations

from delegscan.contract.bytecode_evidence import (
    BytecodeEvidenceExtractor,
    count_delegatecall_lines,
    delegatecall_line_numbers,
    has_delegatecall,
)
from delegscan.contract.contract_model import Artifact, BytecodeEvidence
from delegscan.contract.metadata import METADATA_MARKER

from conftest import (
    CLEAN_RUNTIME,
    DELEG_RUNTIME,
    METADATA_TAIL,
    PREAMBLE,
    ByteDisassembler,
    CannedDisassembler,
    FailingDisassembler,
)


def _artifact(runtime=None, creation=None) -> Artifact:
    return Artifact(
        artifact_path="out/T.sol/T.json",
        contract_name="T",
        runtime_bytecode=runtime,
        creation_bytecode=creation,
    )


class TestTokenMatching:
    def test_whole_word_case_insensitive(self):
        assert has_delegatecall(["00000012: delegatecall"])
        assert has_delegatecall(["00000012: DELEGATECALL"])

    def test_partial_word_does_not_match(self):
        assert not has_delegatecall(["00000012: DELEGATECALLX", "XDELEGATECALL"])

    def test_line_numbers_are_one_based(self):
        lines = ["PUSH1 0x80", "DELEGATECALL", "STOP", "delegatecall"]
        assert delegatecall_line_numbers(lines) == [2, 4]
        assert count_delegatecall_lines(lines) == 2


class TestEvaluate:
    def test_runtime_hit_in_reachable_code(self, disassembler):
        evidence = BytecodeEvidenceExtractor(disassembler).evaluate(_artifact(runtime=DELEG_RUNTIME))
        assert evidence.runtime_has_delegate_stripped
        assert evidence.runtime_has_delegate_full
        assert not evidence.metadata_only

    def test_metadata_only_hit(self, disassembler):
        evidence = BytecodeEvidenceExtractor(disassembler).evaluate(_artifact(runtime=CLEAN_RUNTIME))
        assert not evidence.runtime_has_delegate_stripped
        assert evidence.runtime_has_delegate_full
        assert evidence.metadata_only

    def test_metadata_only_with_canned_disassembly(self):
        # B = A ++ marker ++ C
        a = PREAMBLE
        c = "1220" + "00" * 32
        full = a + METADATA_MARKER + c
        fake = CannedDisassembler({
            a: ["00000000: PUSH1 0x80", "00000002: PUSH1 0x40", "00000004: MSTORE"],
            full: ["00000000: PUSH1 0x80", "0000000c: DELEGATECALL"],
        })
        evidence = BytecodeEvidenceExtractor(fake).evaluate(_artifact(runtime="0x" + full))
        assert evidence.metadata_only
        assert not evidence.runtime_has_delegate_stripped

    def test_creation_side_independent(self, disassembler):
        evidence = BytecodeEvidenceExtractor(disassembler).evaluate(
            _artifact(runtime=CLEAN_RUNTIME.replace(METADATA_TAIL, ""), creation=DELEG_RUNTIME)
        )
        assert evidence.creation_has_delegate_stripped
        assert not evidence.runtime_has_delegate_stripped
        assert not evidence.runtime_has_delegate_full

    def test_creation_metadata_only_sets_flag(self, disassembler):
        evidence = BytecodeEvidenceExtractor(disassembler).evaluate(
            _artifact(runtime=DELEG_RUNTIME, creation=CLEAN_RUNTIME)
        )
        assert evidence.runtime_has_delegate_stripped
        assert evidence.metadata_only

    def test_empty_runtime_and_missing_creation(self, disassembler):
        evidence = BytecodeEvidenceExtractor(disassembler).evaluate(_artifact(runtime="0x"))
        assert evidence == BytecodeEvidence()
        assert disassembler.calls == []

    def test_absent_fields(self, disassembler):
        evidence = BytecodeEvidenceExtractor(disassembler).evaluate(_artifact())
        assert evidence == BytecodeEvidence()

    def test_two_calls_per_side(self, disassembler):
        BytecodeEvidenceExtractor(disassembler).evaluate(_artifact(runtime=DELEG_RUNTIME, creation=DELEG_RUNTIME))
        assert len(disassembler.calls) == 4

    def test_disassembly_failure_is_no_evidence(self):
        evidence = BytecodeEvidenceExtractor(FailingDisassembler()).evaluate(
            _artifact(runtime=DELEG_RUNTIME, creation=DELEG_RUNTIME)
        )
        assert evidence == BytecodeEvidence()

    def test_undecodable_hex_is_no_evidence(self, disassembler):
        evidence = BytecodeEvidenceExtractor(disassembler).evaluate(
            _artifact(runtime="0x73__$abcdef$__f4")
        )
        assert evidence == BytecodeEvidence()

    def test_marker_at_start_skips_stripped_call(self, disassembler):
        evidence = BytecodeEvidenceExtractor(disassembler).evaluate(_artifact(runtime="0x" + METADATA_TAIL))
        assert not evidence.runtime_has_delegate_stripped
        assert evidence.runtime_has_delegate_full
        assert len(disassembler.calls) == 1

    def test_unaligned_marker_text_does_not_hide_reachable_hit(self, disassembler):
        # 60 f4 0a 26 46 ...: the marker digits straddle byte boundaries
        runtime = "0x60f40" + METADATA_MARKER + "0"
        evidence = BytecodeEvidenceExtractor(disassembler).evaluate(_artifact(runtime=runtime))
        assert evidence.runtime_has_delegate_stripped
        assert evidence.runtime_has_delegate_full
        assert not evidence.metadata_only
