"""Resolve module descriptors against per-run parameter overrides."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional, Sequence

from .descriptors import Argument, ModuleDescriptor, ParameterReference, ParameterValue, ResolvedDeployment
from .errors import (
    DescriptorError,
    DuplicateModuleNameError,
    DuplicateParameterError,
    InvalidParameterValueError,
    MissingParameterError,
    UnknownParameterReferenceError,
)

_LOGGER = logging.getLogger(__name__)


def _is_concrete(value: Any) -> bool:
    return isinstance(value, (int, str)) and not isinstance(value, bool)


def _check_declarations(descriptor: ModuleDescriptor) -> None:
    declared: set[str] = set()
    for name in descriptor.parameter_names:
        if name in declared:
            raise DuplicateParameterError(descriptor.name, name)
        declared.add(name)
    for reference in descriptor.references():
        if reference.name not in declared:
            raise UnknownParameterReferenceError(descriptor.name, reference.name)


def _resolve_parameters(
    descriptor: ModuleDescriptor, overrides: Mapping[str, ParameterValue]
) -> Dict[str, ParameterValue]:
    resolved: Dict[str, ParameterValue] = {}
    for declaration in descriptor.parameters:
        if declaration.name in overrides:
            value = overrides[declaration.name]
        elif not declaration.required:
            value = declaration.default
        else:
            raise MissingParameterError(descriptor.name, declaration.name)
        if not _is_concrete(value):
            raise InvalidParameterValueError(
                descriptor.name, declaration.name, f"must be an integer or string, got {value!r}"
            )
        resolved[declaration.name] = value

    unused = sorted(set(overrides) - set(resolved))
    if unused:
        _LOGGER.warning("%s: ignoring overrides for undeclared parameters: %s", descriptor.name, ", ".join(unused))
    return resolved


def _substitute(argument: Argument, values: Mapping[str, ParameterValue]) -> ParameterValue:
    if isinstance(argument, ParameterReference):
        return values[argument.name]
    return argument


def _resolve_value(descriptor: ModuleDescriptor, values: Mapping[str, ParameterValue]) -> Optional[int]:
    if descriptor.attached_value is None:
        return None
    value = _substitute(descriptor.attached_value, values)
    source = descriptor.attached_value.name if isinstance(descriptor.attached_value, ParameterReference) else None
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidParameterValueError(descriptor.name, source, f"must resolve to an integer wei amount, got {value!r}")
    if value < 0:
        raise InvalidParameterValueError(descriptor.name, source, f"must not be negative, got {value}")
    return value


def resolve(descriptor: ModuleDescriptor, overrides: Optional[Mapping[str, ParameterValue]] = None) -> ResolvedDeployment:
    """Turn ``descriptor`` into a concrete :class:`ResolvedDeployment`.

    Each declared parameter takes its value from ``overrides`` when present and
    from its default otherwise. References in the constructor arguments and
    attached value are then replaced by those values; literals pass through.

    Args:
        descriptor: The module to resolve.
        overrides: Parameter name to value for this run. May be empty.

    Returns:
        The resolved deployment. Resolving the same inputs twice yields equal
        results.

    Raises:
        MissingParameterError: A parameter has neither override nor default.
        UnknownParameterReferenceError: An argument names an undeclared parameter.
        DuplicateParameterError: The module declares a parameter twice.
        InvalidParameterValueError: A value has an unusable type.
    """

    _check_declarations(descriptor)
    values = _resolve_parameters(descriptor, overrides or {})
    args = tuple(_substitute(argument, values) for argument in descriptor.constructor_args)
    attached_value = _resolve_value(descriptor, values)

    _LOGGER.debug("Resolved %s#%s with %d argument(s)", descriptor.name, descriptor.contract_name, len(args))
    return ResolvedDeployment(
        module_name=descriptor.name,
        contract_name=descriptor.contract_name,
        parameters=tuple(values.items()),
        constructor_args=args,
        attached_value=attached_value,
    )


def validate_module_names(descriptors: Iterable[ModuleDescriptor]) -> None:
    """Ensure module names are unique across a run."""

    seen: set[str] = set()
    for descriptor in descriptors:
        if descriptor.name in seen:
            raise DuplicateModuleNameError(descriptor.name)
        seen.add(descriptor.name)


@dataclass(frozen=True)
class DeploymentPlan:
    """Outcome of resolving every module in a run."""

    deployments: Mapping[str, ResolvedDeployment] = field(default_factory=dict)
    failures: Mapping[str, DescriptorError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def ordered(self) -> List[ResolvedDeployment]:
        return list(self.deployments.values())

    def as_dict(self) -> MutableMapping[str, Any]:
        return {
            "ok": self.ok,
            "deployments": [deployment.as_dict() for deployment in self.deployments.values()],
            "failures": {
                name: {"error": type(error).__name__, "parameter": error.parameter, "message": str(error)}
                for name, error in self.failures.items()
            },
        }


def resolve_all(
    descriptors: Sequence[ModuleDescriptor],
    parameters: Optional[Mapping[str, Mapping[str, ParameterValue]]] = None,
) -> DeploymentPlan:
    """Resolve a run of modules with per-module overrides.

    ``parameters`` uses the layout of an Ignition parameters file: module name
    mapped to that module's overrides. Name validation happens before anything
    is resolved and a duplicate aborts the run. Failures in one module are
    recorded on the returned plan without affecting the others.
    """

    validate_module_names(descriptors)
    parameters = parameters or {}

    known = {descriptor.name for descriptor in descriptors}
    stray = sorted(set(parameters) - known)
    if stray:
        _LOGGER.warning("Ignoring parameters for modules outside this run: %s", ", ".join(stray))

    deployments: Dict[str, ResolvedDeployment] = {}
    failures: Dict[str, DescriptorError] = {}
    for descriptor in descriptors:
        try:
            deployments[descriptor.name] = resolve(descriptor, parameters.get(descriptor.name, {}))
        except DescriptorError as exc:
            _LOGGER.error("%s: %s", descriptor.name, exc)
            failures[descriptor.name] = exc

    return DeploymentPlan(deployments=deployments, failures=failures)


__all__ = [
    "DeploymentPlan",
    "resolve",
    "resolve_all",
    "validate_module_names",
]
