"""
Unit tests for the evm-calldata command line

Run with:
    pytest evm_calldata/tests/unit/test_main.py -v
"""

import json
import logging

import pytest

from evm_calldata.abi.parser import AbiParser
from evm_calldata.main import main, resolve_function
from evm_calldata.tests.helpers import SAMPLE_BYTECODE, word
from evm_calldata.utils.exceptions import CalldataError

RECIPIENT = "0x" + "00" * 19 + "01"


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures the root logger; put it back afterwards"""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("EVM_CALLDATA_MAX_TYPE_DEPTH", raising=False)


class TestResolveFunction:
    """Tests for function lookup by name or signature"""

    def test_by_name(self, token_abi):
        abi = AbiParser.from_items(token_abi)
        assert resolve_function(abi, "transfer").signature() == "transfer(address,uint256)"

    def test_by_signature(self, token_abi):
        abi = AbiParser.from_items(token_abi)
        assert resolve_function(abi, "mint(address, uint256)").signature() == "mint(address,uint256)"

    def test_overload_by_argument_count(self, token_abi):
        abi = AbiParser.from_items(token_abi)
        assert resolve_function(abi, "mint", [5]).signature() == "mint(uint256)"

    def test_ambiguous(self, token_abi):
        with pytest.raises(CalldataError) as exc_info:
            resolve_function(AbiParser.from_items(token_abi), "mint")
        assert "ambiguous" in exc_info.value.message

    def test_not_found(self, token_abi):
        with pytest.raises(CalldataError):
            resolve_function(AbiParser.from_items(token_abi), "burn")


class TestEncodeCommand:
    """Tests for `evm-calldata encode`"""

    def test_function_call(self, abi_file, capsys):
        code = main([
            "encode", "--abi", str(abi_file), "--function", "transfer",
            "--args", json.dumps([RECIPIENT, 1000]), "--selector",
        ])

        assert code == 0
        assert capsys.readouterr().out.strip() == "0xa9059cbb" + word(1) + word(1000)

    def test_parameters_only(self, abi_file, capsys):
        main(["encode", "--abi", str(abi_file), "--function", "transfer",
              "--args", json.dumps([RECIPIENT, "0x3e8"])])

        assert capsys.readouterr().out.strip() == "0x" + word(1) + word(1000)

    def test_constructor(self, abi_file, capsys):
        code = main(["encode", "--abi", str(abi_file), "--constructor",
                     "--args", '["Token", 1000]'])

        assert code == 0
        assert capsys.readouterr().out.strip().startswith("0x" + word(0x40) + word(1000))

    def test_constructor_with_bytecode(self, abi_file, capsys):
        main(["encode", "--abi", str(abi_file), "--constructor",
              "--args", '["Token", 1000]', "--bytecode", SAMPLE_BYTECODE])

        out = capsys.readouterr().out.strip()
        assert out.startswith(SAMPLE_BYTECODE + word(0x40))

    def test_argument_count_mismatch(self, abi_file, capsys):
        code = main(["encode", "--abi", str(abi_file), "--constructor", "--args", '["Token"]'])

        assert code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Argument count mismatch: expected 2, got 1" in captured.err

    def test_args_must_be_array(self, abi_file, capsys):
        code = main(["encode", "--abi", str(abi_file), "--function", "transfer", "--args", "{}"])

        assert code == 1
        assert "JSON array" in capsys.readouterr().err

    def test_invalid_utf8_string(self, abi_file, capsys):
        code = main(["encode", "--abi", str(abi_file), "--constructor",
                     "--args", '["\\ud800", 1000]'])

        assert code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "not valid UTF-8" in captured.err

    def test_missing_abi_file(self, tmp_path, capsys):
        code = main(["encode", "--abi", str(tmp_path / "none.json"), "--constructor"])

        assert code == 1
        assert "ABI file not found" in capsys.readouterr().err

    def test_config_depth_limit(self, tmp_path, capsys):
        abi_path = tmp_path / "deep.json"
        abi_path.write_text(json.dumps([{
            "type": "function", "name": "f",
            "inputs": [{"name": "x", "type": "uint8[][][]"}],
        }]))
        config_path = tmp_path / "config.yaml"
        config_path.write_text("max_type_depth: 2\n")

        code = main(["--config", str(config_path), "encode", "--abi", str(abi_path),
                     "--function", "f", "--args", "[[]]"])

        assert code == 1
        assert "nesting exceeds 2 levels" in capsys.readouterr().err


class TestSignatureCommand:
    """Tests for `evm-calldata signature`"""

    def test_all_functions(self, abi_file, capsys):
        assert main(["signature", "--abi", str(abi_file)]) == 0

        lines = capsys.readouterr().out.strip().splitlines()
        assert "0xa9059cbb  transfer(address,uint256)" in lines
        assert "0x70a08231  balanceOf(address)" in lines
        assert len(lines) == 5

    def test_single_function(self, abi_file, capsys):
        main(["signature", "--abi", str(abi_file), "--function", "mint(uint256)"])
        assert capsys.readouterr().out.strip() == "0xa0712d68  mint(uint256)"

    def test_log_file(self, abi_file, tmp_path, capsys):
        log_file = tmp_path / "logs" / "cli.log"
        main(["--log-level", "DEBUG", "--log-file", str(log_file),
              "signature", "--abi", str(abi_file)])

        assert log_file.exists()
        assert "Loaded ABI" in log_file.read_text()
