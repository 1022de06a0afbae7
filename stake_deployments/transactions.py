"""Render resolved deployments as unsigned deployment transactions.

Nothing here signs or submits anything. The output is the transaction a
deployment engine would send, which makes a resolved plan easy to inspect
before it is executed.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from eth_abi import encode
from eth_abi.exceptions import ABITypeError, EncodingError, ParseError
from eth_utils import remove_0x_prefix
from eth_utils.abi import collapse_if_tuple
from web3 import Web3

from .descriptors import ParameterValue, ResolvedDeployment
from .errors import ConstructorArgumentError, DescriptorError


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract as emitted by Hardhat."""

    contract_name: str
    abi: List[Mapping[str, Any]] = field(default_factory=list)
    bytecode: str = "0x"

    @property
    def constructor(self) -> Optional[Mapping[str, Any]]:
        for entry in self.abi:
            if entry.get("type") == "constructor":
                return entry
        return None

    @property
    def payable(self) -> bool:
        constructor = self.constructor
        if constructor is None:
            return False
        return constructor.get("stateMutability") == "payable" or bool(constructor.get("payable"))


def load_artifact(path: Path) -> ContractArtifact:
    """Load a Hardhat artifact JSON file."""

    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise DescriptorError(f"Unable to read artifact {path}: {exc}") from exc

    bytecode = payload.get("bytecode")
    if isinstance(bytecode, Mapping):  # solc standard JSON nests it under "object"
        bytecode = bytecode.get("object")
    if not isinstance(bytecode, str):
        raise DescriptorError(f"Artifact {path} has no bytecode")

    return ContractArtifact(
        contract_name=str(payload.get("contractName") or Path(path).stem),
        abi=list(payload.get("abi") or []),
        bytecode=bytecode,
    )


def find_artifact(artifacts_dir: Path, contract_name: str) -> ContractArtifact:
    """Locate ``<contract_name>.json`` anywhere below ``artifacts_dir``."""

    base = Path(artifacts_dir)
    candidates = sorted(
        path for path in base.rglob(f"{contract_name}.json") if not path.name.endswith(".dbg.json")
    )
    if not candidates:
        raise DescriptorError(f"No artifact for contract {contract_name!r} under {base}")
    return load_artifact(candidates[0])


def encode_constructor_args(
    abi: Sequence[Mapping[str, Any]], args: Sequence[ParameterValue], *, module: Optional[str] = None
) -> bytes:
    """ABI-encode ``args`` against the constructor declared in ``abi``."""

    constructor = next((entry for entry in abi if entry.get("type") == "constructor"), None)
    inputs = list(constructor.get("inputs", [])) if constructor else []
    if len(inputs) != len(args):
        raise ConstructorArgumentError(
            f"Constructor expects {len(inputs)} argument(s) but {len(args)} were resolved",
            module=module,
        )
    if not inputs:
        return b""

    types = [collapse_if_tuple(dict(item)) for item in inputs]
    try:
        return encode(types, list(args))
    except (ABITypeError, EncodingError, ParseError) as exc:
        raise ConstructorArgumentError(f"Cannot encode constructor arguments {types}: {exc}", module=module) from exc


def build_deployment_transaction(
    resolved: ResolvedDeployment,
    artifact: ContractArtifact,
    *,
    sender: Optional[str] = None,
    chain_id: Optional[int] = None,
    gas: Optional[int] = None,
    nonce: Optional[int] = None,
) -> Dict[str, Any]:
    """Assemble the unsigned contract-creation transaction for ``resolved``."""

    value = resolved.attached_value or 0
    if value and not artifact.payable:
        raise ConstructorArgumentError(
            f"{resolved.future_id} sends {value} wei but the constructor is not payable",
            module=resolved.module_name,
        )

    encoded = encode_constructor_args(artifact.abi, resolved.constructor_args, module=resolved.module_name)
    transaction: Dict[str, Any] = {
        "data": "0x" + remove_0x_prefix(artifact.bytecode) + encoded.hex(),
        "value": Web3.to_hex(value),
    }
    if sender is not None:
        transaction["from"] = Web3.to_checksum_address(sender)
    if chain_id is not None:
        transaction["chainId"] = chain_id
    if gas is not None:
        transaction["gas"] = gas
    if nonce is not None:
        transaction["nonce"] = nonce
    return transaction


__all__ = [
    "ContractArtifact",
    "build_deployment_transaction",
    "encode_constructor_args",
    "find_artifact",
    "load_artifact",
]
