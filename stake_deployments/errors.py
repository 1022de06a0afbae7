"""Exceptions raised while validating and resolving deployment descriptors."""
from __future__ import annotations

from typing import Optional


class DescriptorError(ValueError):
    """Base class for descriptor problems that must stop a deployment."""

    def __init__(self, message: str, *, module: Optional[str] = None, parameter: Optional[str] = None) -> None:
        super().__init__(message)
        self.module = module
        self.parameter = parameter


class MissingParameterError(DescriptorError):
    """Raised when a parameter has neither an override nor a default."""

    def __init__(self, module: str, parameter: str) -> None:
        super().__init__(
            f"Module {module!r} requires parameter {parameter!r} but no value was supplied",
            module=module,
            parameter=parameter,
        )


class UnknownParameterReferenceError(DescriptorError):
    """Raised when a constructor argument or value references an undeclared parameter."""

    def __init__(self, module: str, parameter: str) -> None:
        super().__init__(
            f"Module {module!r} references undeclared parameter {parameter!r}",
            module=module,
            parameter=parameter,
        )


class DuplicateModuleNameError(DescriptorError):
    """Raised when two descriptors in one run share a name."""

    def __init__(self, module: str) -> None:
        super().__init__(f"Module name {module!r} is declared more than once", module=module)


class DuplicateParameterError(DescriptorError):
    """Raised when a module declares the same parameter twice."""

    def __init__(self, module: str, parameter: str) -> None:
        super().__init__(
            f"Module {module!r} declares parameter {parameter!r} more than once",
            module=module,
            parameter=parameter,
        )


class InvalidParameterValueError(DescriptorError):
    """Raised when a resolved value has the wrong type for where it is used."""

    def __init__(self, module: str, parameter: Optional[str], detail: str) -> None:
        target = f"parameter {parameter!r}" if parameter else "a literal"
        super().__init__(f"Module {module!r}: {target} {detail}", module=module, parameter=parameter)


class ParameterFileError(DescriptorError):
    """Raised when an override document cannot be interpreted."""


class ConstructorArgumentError(DescriptorError):
    """Raised when resolved arguments do not fit the compiled constructor."""


__all__ = [
    "ConstructorArgumentError",
    "DescriptorError",
    "DuplicateModuleNameError",
    "DuplicateParameterError",
    "InvalidParameterValueError",
    "MissingParameterError",
    "ParameterFileError",
    "UnknownParameterReferenceError",
]
