"""
Injectable decorator for automatic dependency injection.

This decorator enables classes to resolve their dependencies from the DI
container when they are constructed without them.
"""

import inspect
import logging
from functools import wraps
from typing import Any, Tuple, Type, TypeVar, Union, get_args, get_origin, get_type_hints

T = TypeVar("T")

logger = logging.getLogger(__name__)


def injectable(cls: Type[T]) -> Type[T]:
    """
    Mark a class as injectable with automatic dependency resolution.

    This decorator:
    1. Analyzes the class constructor's type hints
    2. Fills parameters that were not passed with registered container services
    3. Handles Optional[T] types by trying to resolve T, falling back to the default
    4. Preserves original constructor behavior for manual instantiation

    Usage:
        @injectable
        class MyService:
            def __init__(self, aws_client: AWSClient, config: Optional[PlacementConfig] = None):
                ...

    Args:
        cls: The class to make injectable

    Returns:
        The same class with enhanced constructor
    """
    original_init = cls.__init__

    try:
        hints = get_type_hints(original_init)
    except Exception as e:
        logger.warning(f"Could not get type hints for {cls.__name__}: {e}")
        hints = {}

    sig = inspect.signature(original_init)

    @wraps(original_init)
    def enhanced_init(self, *args, **kwargs):
        """Enhanced constructor with automatic dependency resolution."""
        # If positional arguments are provided, use original constructor directly
        if args:
            return original_init(self, *args, **kwargs)

        resolved_kwargs = dict(kwargs)
        for param_name, param in sig.parameters.items():
            if param_name == "self" or param_name in kwargs:
                continue
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            if param_name not in hints:
                continue
            found, value = _resolve_dependency(hints[param_name])
            if found:
                resolved_kwargs[param_name] = value

        original_init(self, **resolved_kwargs)

    cls.__init__ = enhanced_init
    cls._injectable = True
    cls._original_init = original_init

    logger.debug(f"Made {cls.__name__} injectable")
    return cls


def is_primitive_type(annotation: Any) -> bool:
    """Check if a type annotation represents a type that shouldn't be resolved from DI."""
    primitive_types = {str, int, float, bool, bytes, type(None)}
    if annotation in primitive_types or annotation is Any:
        return True
    return get_origin(annotation) in primitive_types


def is_optional_type(annotation: Any) -> bool:
    """Check if a type annotation represents Optional[T]."""
    if get_origin(annotation) is Union:
        args = get_args(annotation)
        return len(args) == 2 and type(None) in args
    return False


def unwrap_optional(annotation: Any) -> Any:
    """Extract T from Optional[T]; other annotations are returned unchanged."""
    if is_optional_type(annotation):
        return next(arg for arg in get_args(annotation) if arg is not type(None))
    return annotation


def _resolve_dependency(annotation: Any) -> Tuple[bool, Any]:
    """Resolve a registered dependency; returns (found, value)."""
    # Import here to avoid circular imports
    from ec2launch.infrastructure.di.container import get_container

    target = unwrap_optional(annotation)
    if is_primitive_type(target) or not isinstance(target, type):
        return False, None

    container = get_container()
    if not container.has(target):
        return False, None
    return True, container.get(target)


def is_injectable(cls: Type) -> bool:
    """Check if a class has been marked as injectable."""
    return bool(getattr(cls, "_injectable", False))
