"""Parameterized deployment descriptors for the token and staking contracts."""
from __future__ import annotations

from .descriptors import ModuleDescriptor, ParameterDeclaration, ParameterReference, ResolvedDeployment, param
from .errors import (
    ConstructorArgumentError,
    DescriptorError,
    DuplicateModuleNameError,
    DuplicateParameterError,
    InvalidParameterValueError,
    MissingParameterError,
    ParameterFileError,
    UnknownParameterReferenceError,
)
from .modules import default_modules, get_module
from .resolver import DeploymentPlan, resolve, resolve_all, validate_module_names

__all__ = [
    "ConstructorArgumentError",
    "DeploymentPlan",
    "DescriptorError",
    "DuplicateModuleNameError",
    "DuplicateParameterError",
    "InvalidParameterValueError",
    "MissingParameterError",
    "ModuleDescriptor",
    "ParameterDeclaration",
    "ParameterFileError",
    "ParameterReference",
    "ResolvedDeployment",
    "UnknownParameterReferenceError",
    "default_modules",
    "get_module",
    "param",
    "resolve",
    "resolve_all",
    "validate_module_names",
]
