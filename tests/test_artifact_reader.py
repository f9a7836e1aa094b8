"""Tests for artifact location and parsing."""

from __future__ import annotations

import json

import pytest

from delegscan.contract.artifact_reader import find_artifacts, parse_artifact, read_artifact
from delegscan.errors import ArtifactReadError

from conftest import DELEG_RUNTIME, UPGRADE_TO, foundry_artifact


class TestFindArtifacts:
    def test_recursive_sorted_json_only(self, write_artifact, tmp_path):
        write_artifact("B.sol/B.json", {})
        write_artifact("A.sol/A.json", {})
        write_artifact("build-info/abc.json", {})
        write_artifact("A.sol/notes.txt", "x")
        found = [p.relative_to(tmp_path / "out").as_posix() for p in find_artifacts(tmp_path / "out")]
        assert found == ["A.sol/A.json", "B.sol/B.json", "build-info/abc.json"]

    def test_missing_root(self, tmp_path):
        assert find_artifacts(tmp_path / "nope") == []


class TestFoundryLayout:
    def test_fields(self):
        data = foundry_artifact(
            "Proxy",
            "src/Proxy.sol",
            creation="0x6080",
            abi=[UPGRADE_TO],
            sources=["src/Proxy.sol", "src/lib/Forwarder.sol"],
        )
        artifact = parse_artifact(data, "out/Proxy.sol/Proxy.json")
        assert artifact.contract_name == "Proxy"
        assert artifact.primary_source_path == "src/Proxy.sol"
        assert artifact.runtime_bytecode == DELEG_RUNTIME
        assert artifact.creation_bytecode == "0x6080"
        assert artifact.imported_source_paths == ("src/Proxy.sol", "src/lib/Forwarder.sol")
        assert artifact.abi_entries == (UPGRADE_TO,)
        assert artifact.is_candidate

    def test_metadata_as_json_string(self):
        data = foundry_artifact("Proxy", "src/Proxy.sol")
        data["rawMetadata"] = json.dumps(data.pop("metadata"))
        artifact = parse_artifact(data)
        assert artifact.contract_name == "Proxy"
        assert artifact.primary_source_path == "src/Proxy.sol"

    def test_compilation_target_mismatch_has_no_primary_source(self):
        data = foundry_artifact("Proxy", "src/Proxy.sol")
        data["contractName"] = "Other"
        assert parse_artifact(data).primary_source_path is None

    def test_sources_order_preserved(self):
        data = foundry_artifact("P", "src/P.sol", sources=["z.sol", "a.sol", "src/P.sol"])
        assert parse_artifact(data).imported_source_paths == ("z.sol", "a.sol", "src/P.sol")


class TestHardhatLayout:
    def test_string_bytecode_and_source_name(self):
        artifact = parse_artifact({
            "contractName": "Box",
            "sourceName": "contracts/Box.sol",
            "abi": [],
            "bytecode": "0x6080",
            "deployedBytecode": "0x6080f4",
        })
        assert artifact.contract_name == "Box"
        assert artifact.primary_source_path == "contracts/Box.sol"
        assert artifact.runtime_bytecode == "0x6080f4"
        assert artifact.imported_source_paths == ()


class TestFallbacks:
    def test_unknown_name_and_first_source(self):
        artifact = parse_artifact({"deployedBytecode": "0x", "metadata": {"sources": {"a.sol": {}, "b.sol": {}}}})
        assert artifact.contract_name == "UNKNOWN"
        assert artifact.primary_source_path == "a.sol"

    def test_non_candidate_without_runtime(self):
        artifact = parse_artifact({"abi": [], "bytecode": {"object": "0x6080"}})
        assert not artifact.is_candidate

    def test_null_runtime_is_not_candidate(self):
        assert not parse_artifact({"deployedBytecode": None}).is_candidate

    def test_runtime_object_missing_is_empty(self):
        artifact = parse_artifact({"deployedBytecode": {"sourceMap": ""}})
        assert artifact.is_candidate
        assert artifact.runtime_bytecode == ""

    def test_abi_not_a_list(self):
        assert parse_artifact({"abi": {"oops": 1}}).abi_entries == ()


class TestReadArtifact:
    def test_malformed_json(self, write_artifact):
        path = write_artifact("Bad.sol/Bad.json", "{not json")
        with pytest.raises(ArtifactReadError):
            read_artifact(path)

    def test_non_object_json(self, write_artifact):
        path = write_artifact("List.sol/List.json", [1, 2, 3])
        with pytest.raises(ArtifactReadError):
            read_artifact(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ArtifactReadError):
            read_artifact(tmp_path / "missing.json")

    def test_reads_path(self, write_artifact):
        path = write_artifact("Proxy.sol/Proxy.json", foundry_artifact("Proxy", "src/Proxy.sol"))
        artifact = read_artifact(path)
        assert artifact.artifact_path == str(path)
        assert artifact.contract_name == "Proxy"
