"""Deployment modules for the token and staking contracts."""
from __future__ import annotations

from decimal import Decimal
from typing import Dict, List

from web3 import Web3

from .descriptors import ModuleDescriptor, ParameterDeclaration, param

# 1,000,000 tokens with 18 decimals.
INITIAL_TOKEN_SUPPLY = Web3.to_wei(1_000_000, "ether")
INITIAL_CONTRACT_BALANCE = Web3.to_wei(Decimal("0.1"), "ether")

ERC20_TOKEN_MODULE = ModuleDescriptor(
    name="ERC20TokenModule",
    contract_name="ERC",
    parameters=(ParameterDeclaration("initialSupply", INITIAL_TOKEN_SUPPLY),),
    attached_value=param("initialSupply"),
)

STAKE_ETH_MODULE = ModuleDescriptor(
    name="StakeEthModule",
    contract_name="StakeEther",
    parameters=(ParameterDeclaration("initialBalance", INITIAL_CONTRACT_BALANCE),),
    attached_value=param("initialBalance"),
)

# Point stakingTokenAddress at the ERC20TokenModule#ERC deployment for the target network.
STAKE_ERC20_MODULE = ModuleDescriptor(
    name="StakeERC20Module",
    contract_name="StakeERC20",
    parameters=(ParameterDeclaration("stakingTokenAddress"),),
    constructor_args=(param("stakingTokenAddress"),),
)

_MODULES: Dict[str, ModuleDescriptor] = {
    module.name: module for module in (ERC20_TOKEN_MODULE, STAKE_ETH_MODULE, STAKE_ERC20_MODULE)
}


def default_modules() -> List[ModuleDescriptor]:
    """Return the project's modules in deployment order."""

    return list(_MODULES.values())


def get_module(name: str) -> ModuleDescriptor:
    try:
        return _MODULES[name]
    except KeyError:
        raise KeyError(f"Unknown module {name!r}; expected one of: {', '.join(_MODULES)}") from None


__all__ = [
    "ERC20_TOKEN_MODULE",
    "INITIAL_CONTRACT_BALANCE",
    "INITIAL_TOKEN_SUPPLY",
    "STAKE_ERC20_MODULE",
    "STAKE_ETH_MODULE",
    "default_modules",
    "get_module",
]
