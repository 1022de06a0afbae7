"""Data model for parameterized contract deployments.

A :class:`ModuleDescriptor` is authored once and describes a single contract
instantiation: the parameters it accepts (with optional defaults), the
constructor arguments and the wei value sent alongside the deployment.
Arguments are either literals or :class:`ParameterReference` placeholders that
the resolver swaps for concrete values.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional, Tuple, Union

ParameterValue = Union[int, str]

_BIGINT_PATTERN = re.compile(r"^-?\d+n$")


@dataclass(frozen=True)
class ParameterReference:
    """Placeholder for the resolved value of a declared parameter."""

    name: str

    def as_dict(self) -> Dict[str, str]:
        return {"param": self.name}


Argument = Union[ParameterValue, ParameterReference]


def param(name: str) -> ParameterReference:
    """Shorthand used by module definitions to reference a parameter."""

    return ParameterReference(name)


def coerce_value(value: Any) -> ParameterValue:
    """Normalise a literal from JSON or the command line.

    Integers are kept as-is, ``"123n"`` strings (the Ignition bigint notation)
    become integers and any other string is treated as an opaque identifier.

    Raises:
        TypeError: If the value is a float, boolean, ``None`` or container.
    """

    if isinstance(value, bool):
        raise TypeError("booleans are not valid parameter values")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if _BIGINT_PATTERN.match(text):
            return int(text[:-1])
        return value
    raise TypeError(f"unsupported parameter value {value!r} ({type(value).__name__})")


def _argument_from_payload(value: Any) -> Argument:
    if isinstance(value, Mapping):
        name = value.get("param")
        if not isinstance(name, str) or not name:
            raise TypeError(f"reference payload must carry a 'param' name: {value!r}")
        return ParameterReference(name)
    return coerce_value(value)


def _as_list(payload: Mapping[str, Any], key: str) -> List[Any]:
    value = payload.get(key, [])
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"'{key}' must be a list, got {type(value).__name__}")
    return list(value)


def _argument_as_payload(value: Argument) -> Any:
    if isinstance(value, ParameterReference):
        return value.as_dict()
    return value


@dataclass(frozen=True)
class ParameterDeclaration:
    """A named module input with an optional default."""

    name: str
    default: Optional[ParameterValue] = None

    @property
    def required(self) -> bool:
        return self.default is None

    def as_dict(self) -> MutableMapping[str, Any]:
        payload: MutableMapping[str, Any] = {"name": self.name}
        if self.default is not None:
            payload["default"] = self.default
        return payload


@dataclass(frozen=True)
class ModuleDescriptor:
    """Static description of one contract deployment."""

    name: str
    contract_name: str
    parameters: Tuple[ParameterDeclaration, ...] = ()
    constructor_args: Tuple[Argument, ...] = ()
    attached_value: Optional[Argument] = None

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples so descriptors stay hashable.
        object.__setattr__(self, "parameters", tuple(self.parameters))
        object.__setattr__(self, "constructor_args", tuple(self.constructor_args))

    @property
    def parameter_names(self) -> List[str]:
        return [declaration.name for declaration in self.parameters]

    def references(self) -> Iterable[ParameterReference]:
        """Yield every parameter reference used by arguments and value."""

        for argument in self.constructor_args:
            if isinstance(argument, ParameterReference):
                yield argument
        if isinstance(self.attached_value, ParameterReference):
            yield self.attached_value

    def as_dict(self) -> MutableMapping[str, Any]:
        payload: MutableMapping[str, Any] = {
            "name": self.name,
            "contract_name": self.contract_name,
            "parameters": [declaration.as_dict() for declaration in self.parameters],
            "constructor_args": [_argument_as_payload(arg) for arg in self.constructor_args],
        }
        if self.attached_value is not None:
            payload["attached_value"] = _argument_as_payload(self.attached_value)
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ModuleDescriptor":
        """Build a descriptor from the mapping produced by :meth:`as_dict`.

        Raises:
            TypeError: If a field has an unexpected shape.
            KeyError: If ``name`` or ``contract_name`` is missing.
        """

        declarations = []
        for entry in _as_list(payload, "parameters"):
            if not isinstance(entry, Mapping) or not isinstance(entry.get("name"), str):
                raise TypeError(f"parameter declarations need a 'name': {entry!r}")
            default = entry.get("default")
            declarations.append(
                ParameterDeclaration(
                    name=entry["name"],
                    default=None if default is None else coerce_value(default),
                )
            )

        attached = payload.get("attached_value")
        return cls(
            name=str(payload["name"]),
            contract_name=str(payload["contract_name"]),
            parameters=tuple(declarations),
            constructor_args=tuple(_argument_from_payload(arg) for arg in _as_list(payload, "constructor_args")),
            attached_value=None if attached is None else _argument_from_payload(attached),
        )


@dataclass(frozen=True)
class ResolvedDeployment:
    """Concrete deployment request handed to the execution engine."""

    module_name: str
    contract_name: str
    parameters: Tuple[Tuple[str, ParameterValue], ...] = ()
    constructor_args: Tuple[ParameterValue, ...] = ()
    attached_value: Optional[int] = None

    @property
    def future_id(self) -> str:
        """Identifier the engine uses when recording the deployed address."""

        return f"{self.module_name}#{self.contract_name}"

    def parameter(self, name: str) -> ParameterValue:
        for key, value in self.parameters:
            if key == name:
                return value
        raise KeyError(name)

    def as_dict(self) -> MutableMapping[str, Any]:
        payload: MutableMapping[str, Any] = {
            "future_id": self.future_id,
            "module": self.module_name,
            "contract": self.contract_name,
            "parameters": dict(self.parameters),
            "constructor_args": list(self.constructor_args),
        }
        if self.attached_value is not None:
            payload["value"] = self.attached_value
        return payload


__all__ = [
    "Argument",
    "ModuleDescriptor",
    "ParameterDeclaration",
    "ParameterReference",
    "ParameterValue",
    "ResolvedDeployment",
    "coerce_value",
    "param",
]
