"""Dependency Injection package."""
from .container import (
    DIContainer,
    get_container,
    reset_container
)
from .decorators import injectable, is_injectable
from .exceptions import (
    CircularDependencyError,
    DependencyResolutionError,
    FactoryError,
    UnregisteredDependencyError,
)

__all__ = [
    'CircularDependencyError',
    'DIContainer',
    'DependencyResolutionError',
    'FactoryError',
    'UnregisteredDependencyError',
    'get_container',
    'injectable',
    'is_injectable',
    'reset_container'
]
