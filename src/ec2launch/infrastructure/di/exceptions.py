"""Dependency injection errors."""
from typing import List, Optional, Type


class DependencyResolutionError(Exception):
    """Raised when a dependency cannot be resolved."""

    def __init__(self, dependency_type: Type, message: str, parent_type: Optional[Type] = None,
                 parameter_name: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(message)
        self.dependency_type = dependency_type
        self.parent_type = parent_type
        self.parameter_name = parameter_name
        self.cause = cause


class UnregisteredDependencyError(DependencyResolutionError):
    """Raised when a dependency is neither registered nor constructible."""

    def __init__(self, dependency_type: Type, parent_type: Optional[Type] = None,
                 parameter_name: Optional[str] = None):
        name = getattr(dependency_type, "__name__", str(dependency_type))
        message = f"No registration found for {name}"
        if parent_type is not None:
            message += f" (required by {parent_type.__name__}"
            message += f" parameter '{parameter_name}')" if parameter_name else ")"
        super().__init__(dependency_type, message, parent_type, parameter_name)


class UntypedParameterError(DependencyResolutionError):
    """Raised when a constructor parameter has neither a type hint nor a default."""

    def __init__(self, dependency_type: Type, parameter_name: str):
        super().__init__(
            dependency_type,
            f"Parameter '{parameter_name}' of {dependency_type.__name__} has no type hint and no default",
            parameter_name=parameter_name,
        )


class CircularDependencyError(DependencyResolutionError):
    """Raised when resolving a type requires the type itself."""

    def __init__(self, chain: List[Type]):
        names = " -> ".join(getattr(t, "__name__", str(t)) for t in chain)
        super().__init__(chain[-1], f"Circular dependency detected: {names}")
        self.chain = chain


class FactoryError(DependencyResolutionError):
    """Raised when a registered factory fails."""

    def __init__(self, dependency_type: Type, message: str, cause: Optional[Exception] = None):
        super().__init__(dependency_type, message, cause=cause)
