"""
Dependency Injection Container implementation.

Services are registered as singletons (a class, an instance or a factory
called once), as factories (called on every ``get``) or as plain instances.
Unregistered classes are built from their constructor type hints, with
circular dependency detection.
"""
import inspect
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, Set, Type, TypeVar, cast, get_type_hints

from ec2launch.helpers.logger import get_logger
from ec2launch.infrastructure.di.decorators import is_primitive_type, unwrap_optional
from ec2launch.infrastructure.di.exceptions import (
    CircularDependencyError,
    DependencyResolutionError,
    FactoryError,
    UnregisteredDependencyError,
    UntypedParameterError,
)

T = TypeVar('T')
logger = get_logger(__name__)


@contextmanager
def timed_operation(operation_name: str) -> Iterator[None]:
    """Context manager to time and log an operation."""
    start_time = time.time()
    try:
        yield
    finally:
        elapsed_time = time.time() - start_time
        logger.debug(f"{operation_name} completed in {elapsed_time:.4f}s")


class DIContainer:
    """Dependency injection container."""

    def __init__(self):
        self._singletons: Dict[Type, Any] = {}
        self._factories: Dict[Type, Callable[..., Any]] = {}
        self._instances: Dict[Type, Any] = {}
        self._lock = threading.RLock()

    def is_registered(self, cls: Type) -> bool:
        """
        Check if a type is registered with the container.

        Args:
            cls: Class type to check

        Returns:
            True if the type is registered, False otherwise
        """
        return (
            cls in self._singletons or
            cls in self._factories or
            cls in self._instances
        )

    def has(self, service_type: Type[T]) -> bool:
        """Check if service is registered in container."""
        return self.is_registered(service_type)

    def register_singleton(self, cls: Type[T], instance_or_factory: Any = None) -> None:
        """
        Register a singleton type.

        Args:
            cls: Class type to register
            instance_or_factory: Optional pre-created instance, implementation
                class, or factory function taking the container
        """
        self._factories.pop(cls, None)
        self._instances.pop(cls, None)
        if instance_or_factory is None:
            self._singletons[cls] = cls
            logger.debug(f"Registered singleton type {cls.__name__}")
        elif isinstance(instance_or_factory, type):
            self._singletons[cls] = instance_or_factory
            logger.debug(f"Registered singleton {cls.__name__} -> {instance_or_factory.__name__}")
        elif callable(instance_or_factory) and inspect.isfunction(instance_or_factory):
            # Lazily created on first get
            self._singletons[cls] = _LazySingleton(instance_or_factory)
            logger.debug(f"Registered singleton factory for {cls.__name__}")
        else:
            self._singletons[cls] = instance_or_factory
            logger.debug(f"Registered pre-created singleton for {cls.__name__}")

    def register_factory(self, cls: Type[T], factory: Callable[..., T]) -> None:
        """
        Register a factory function for a type.

        Args:
            cls: Class type to register
            factory: Factory function taking the container, called on every get
        """
        self._singletons.pop(cls, None)
        self._instances.pop(cls, None)
        self._factories[cls] = factory
        logger.debug(f"Registered factory for {getattr(cls, '__name__', str(cls))}")

    def register_instance(self, cls: Type[T], instance: T) -> None:
        """
        Register a specific instance for a type.

        Args:
            cls: Class type to register
            instance: Instance to use
        """
        self._singletons.pop(cls, None)
        self._factories.pop(cls, None)
        self._instances[cls] = instance
        logger.debug(f"Registered instance for {cls.__name__}")

    def get(self, cls: Type[T], parent_type: Optional[Type] = None,
            parameter_name: Optional[str] = None,
            dependency_chain: Optional[Set[Type]] = None) -> T:
        """
        Get an instance of the specified type.

        Args:
            cls: Class type to get
            parent_type: Optional parent type that requires this dependency
            parameter_name: Optional parameter name in the parent type
            dependency_chain: Types being resolved, to detect circular dependencies

        Returns:
            Instance of the requested type

        Raises:
            DependencyResolutionError: If the dependency cannot be resolved
        """
        class_name = getattr(cls, '__name__', str(cls))
        chain = dependency_chain or set()
        if cls in chain:
            raise CircularDependencyError(list(chain) + [cls])
        new_chain = chain | {cls}

        with self._lock, timed_operation(f"Resolve {class_name}"):
            if cls in self._instances:
                return cast(T, self._instances[cls])

            if cls in self._singletons:
                registered = self._singletons[cls]
                if isinstance(registered, _LazySingleton):
                    try:
                        instance = registered.factory(self)
                    except DependencyResolutionError:
                        raise
                    except Exception as e:
                        logger.error(f"Failed to create singleton from factory for {class_name}: {str(e)}")
                        raise FactoryError(cls, f"Factory function failed: {str(e)}", e) from e
                    self._singletons[cls] = instance
                    return cast(T, instance)
                if isinstance(registered, type):
                    instance = self._create_instance(registered, new_chain, parent_type, parameter_name)
                    self._singletons[cls] = instance
                    logger.debug(f"Singleton instance created for {class_name}")
                    return cast(T, instance)
                return cast(T, registered)

            if cls in self._factories:
                try:
                    return cast(T, self._factories[cls](self))
                except DependencyResolutionError:
                    raise
                except Exception as e:
                    logger.error(f"Factory failed to create instance of {class_name}: {str(e)}")
                    raise FactoryError(cls, f"Factory function failed: {str(e)}", e) from e

            if not isinstance(cls, type) or inspect.isabstract(cls):
                raise UnregisteredDependencyError(cls, parent_type, parameter_name)

            logger.debug(f"No registration found for {class_name}, attempting direct creation")
            return self._create_instance(cls, new_chain, parent_type, parameter_name)

    def _create_instance(self, cls: Type[T], chain: Set[Type],
                         parent_type: Optional[Type] = None,
                         parameter_name: Optional[str] = None) -> T:
        """Build ``cls`` by resolving its constructor parameters."""
        init = getattr(cls, '_original_init', cls.__init__)
        try:
            hints = get_type_hints(init)
        except Exception:
            hints = {}
        kwargs: Dict[str, Any] = {}

        for name, param in inspect.signature(init).parameters.items():
            if name == 'self' or param.kind in (inspect.Parameter.VAR_POSITIONAL,
                                                inspect.Parameter.VAR_KEYWORD):
                continue
            has_default = param.default is not inspect.Parameter.empty
            annotation = hints.get(name, param.annotation)
            if annotation is inspect.Parameter.empty or is_primitive_type(annotation):
                if has_default:
                    continue
                raise UntypedParameterError(cls, name)
            target = unwrap_optional(annotation)
            if has_default and not self.is_registered(target):
                continue
            kwargs[name] = self.get(target, cls, name, chain)

        try:
            return cls(**kwargs)
        except Exception as e:
            logger.error(f"Failed to create instance of {cls.__name__}: {str(e)}")
            raise DependencyResolutionError(
                cls, f"Failed to create {cls.__name__}: {str(e)}", parent_type, parameter_name, e
            ) from e


class _LazySingleton:
    """Marker for a singleton factory that has not run yet."""

    def __init__(self, factory: Callable[["DIContainer"], Any]):
        self.factory = factory


_container: Optional[DIContainer] = None
_container_lock = threading.Lock()


def get_container() -> DIContainer:
    """Get the global container, creating it on first use."""
    global _container
    with _container_lock:
        if _container is None:
            _container = DIContainer()
        return _container


def reset_container() -> None:
    """Drop the global container (used by tests)."""
    global _container
    with _container_lock:
        _container = None
