"""Tests for rendering unsigned deployment transactions."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from stake_deployments.descriptors import ResolvedDeployment
from stake_deployments.errors import ConstructorArgumentError, DescriptorError
from stake_deployments.transactions import (
    ContractArtifact,
    build_deployment_transaction,
    encode_constructor_args,
    find_artifact,
    load_artifact,
)

TOKEN = "0x" + "11" * 20

STAKE_ERC20_ABI = [
    {
        "inputs": [{"internalType": "address", "name": "_stakingToken", "type": "address"}],
        "stateMutability": "nonpayable",
        "type": "constructor",
    },
    {"inputs": [], "name": "stake", "outputs": [], "stateMutability": "nonpayable", "type": "function"},
]

STAKE_ETHER_ABI = [{"inputs": [], "stateMutability": "payable", "type": "constructor"}]


def _write_artifact(directory: Path, name: str, abi: list, bytecode: str = "0x6080") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.json"
    payload: Dict[str, Any] = {"contractName": name, "abi": abi, "bytecode": bytecode}
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_encode_constructor_args_pads_address() -> None:
    encoded = encode_constructor_args(STAKE_ERC20_ABI, [TOKEN])
    assert encoded.hex() == "00" * 12 + "11" * 20


def test_encode_constructor_args_without_constructor() -> None:
    assert encode_constructor_args([], []) == b""


def test_encode_constructor_args_checks_arity() -> None:
    with pytest.raises(ConstructorArgumentError):
        encode_constructor_args(STAKE_ERC20_ABI, [], module="StakeERC20Module")


def test_encode_constructor_args_rejects_wrong_type() -> None:
    with pytest.raises(ConstructorArgumentError):
        encode_constructor_args(STAKE_ERC20_ABI, [12345])


def test_build_transaction_appends_encoded_args() -> None:
    resolved = ResolvedDeployment(
        module_name="StakeERC20Module",
        contract_name="StakeERC20",
        parameters=(("stakingTokenAddress", TOKEN),),
        constructor_args=(TOKEN,),
    )
    artifact = ContractArtifact("StakeERC20", STAKE_ERC20_ABI, "0x6080")

    transaction = build_deployment_transaction(resolved, artifact, chain_id=4202, nonce=3)

    assert transaction["data"] == "0x6080" + "00" * 12 + "11" * 20
    assert transaction["value"] == "0x0"
    assert transaction["chainId"] == 4202
    assert transaction["nonce"] == 3
    assert "from" not in transaction


def test_build_transaction_sends_value_to_payable_constructor() -> None:
    resolved = ResolvedDeployment(module_name="StakeEthModule", contract_name="StakeEther", attached_value=10**17)
    artifact = ContractArtifact("StakeEther", STAKE_ETHER_ABI, "6080")

    transaction = build_deployment_transaction(resolved, artifact)

    assert transaction["data"] == "0x6080"
    assert transaction["value"] == hex(10**17)


def test_build_transaction_rejects_value_for_non_payable_constructor() -> None:
    resolved = ResolvedDeployment(module_name="ERC20TokenModule", contract_name="ERC", attached_value=1)
    artifact = ContractArtifact("ERC", [], "0x6080")

    with pytest.raises(ConstructorArgumentError) as excinfo:
        build_deployment_transaction(resolved, artifact)

    assert excinfo.value.module == "ERC20TokenModule"


def test_find_artifact_skips_debug_files(tmp_path: Path) -> None:
    contracts = tmp_path / "contracts" / "StakeEther.sol"
    _write_artifact(contracts, "StakeEther", STAKE_ETHER_ABI, "0x60aa")
    (contracts / "StakeEther.dbg.json").write_text("{}", encoding="utf-8")

    artifact = find_artifact(tmp_path, "StakeEther")

    assert artifact.contract_name == "StakeEther"
    assert artifact.bytecode == "0x60aa"
    assert artifact.payable


def test_find_artifact_reports_missing_contract(tmp_path: Path) -> None:
    with pytest.raises(DescriptorError):
        find_artifact(tmp_path, "Nope")


def test_load_artifact_accepts_nested_bytecode(tmp_path: Path) -> None:
    path = tmp_path / "Token.json"
    path.write_text(json.dumps({"abi": [], "bytecode": {"object": "0x6001"}}), encoding="utf-8")

    artifact = load_artifact(path)

    assert artifact.contract_name == "Token"
    assert artifact.bytecode == "0x6001"
    assert not artifact.payable


def test_load_artifact_requires_bytecode(tmp_path: Path) -> None:
    path = tmp_path / "Token.json"
    path.write_text(json.dumps({"abi": []}), encoding="utf-8")

    with pytest.raises(DescriptorError):
        load_artifact(path)


@pytest.mark.parametrize("abi_type", ["uint7", "not a type"])
def test_encode_constructor_args_rejects_invalid_abi_types(abi_type: str) -> None:
    abi = [{"inputs": [{"name": "x", "type": abi_type}], "stateMutability": "nonpayable", "type": "constructor"}]

    with pytest.raises(ConstructorArgumentError) as excinfo:
        encode_constructor_args(abi, [1], module="Broken")

    assert excinfo.value.module == "Broken"


def test_cli_reports_invalid_artifact_abi(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    import scripts.resolve_deployments as cli

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DEPLOY_PARAMETERS_FILE", raising=False)
    abi = [{"inputs": [{"name": "token", "type": "uint7"}], "stateMutability": "nonpayable", "type": "constructor"}]
    _write_artifact(tmp_path / "artifacts" / "StakeERC20.sol", "StakeERC20", abi)

    exit_code = cli.main(
        [
            "StakeERC20Module",
            "--param",
            "StakeERC20Module.stakingTokenAddress=0xabc",
            "--artifacts",
            str(tmp_path / "artifacts"),
            "--json",
        ]
    )

    assert exit_code == 1
    document = json.loads(capsys.readouterr().out)
    assert "uint7" in document["deployments"][0]["transaction_error"]
