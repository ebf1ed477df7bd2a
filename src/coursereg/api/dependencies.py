"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from coursereg.api.events import NotificationCenter
from coursereg.registry import RegistryStore
from coursereg.workflow import WorkflowManager

# Global RegistryStore instance (initialized on app startup)
_registry_store: RegistryStore | None = None


def init_registry_store(db_path: str = "coursereg.db") -> RegistryStore:
    """Initialize the global RegistryStore instance."""
    global _registry_store  # noqa: PLW0603
    _registry_store = RegistryStore(db_path)
    return _registry_store


def close_registry_store() -> None:
    """Close the global RegistryStore instance."""
    global _registry_store  # noqa: PLW0603
    if _registry_store is not None:
        _registry_store.close()
        _registry_store = None


def get_registry_store() -> Generator[RegistryStore, None, None]:
    """Dependency that provides the RegistryStore instance."""
    if _registry_store is None:
        raise RuntimeError("RegistryStore not initialized. Call init_registry_store() first.")
    yield _registry_store


# Type alias for dependency injection
RegistryStoreDep = Annotated[RegistryStore, Depends(get_registry_store)]

# Global NotificationCenter instance
_notification_center: NotificationCenter | None = None


def init_notification_center() -> NotificationCenter:
    """Initialize the global NotificationCenter instance."""
    global _notification_center  # noqa: PLW0603
    _notification_center = NotificationCenter()
    return _notification_center


def close_notification_center() -> None:
    """Drop the global NotificationCenter instance."""
    global _notification_center  # noqa: PLW0603
    _notification_center = None


def get_notification_center() -> Generator[NotificationCenter, None, None]:
    """Dependency that provides the NotificationCenter instance."""
    if _notification_center is None:
        raise RuntimeError(
            "NotificationCenter not initialized. Call init_notification_center() first."
        )
    yield _notification_center


# Type alias for dependency injection
NotificationCenterDep = Annotated[NotificationCenter, Depends(get_notification_center)]

# Global WorkflowManager instance (initialized on app startup)
_workflow_manager: WorkflowManager | None = None


def init_workflow_manager(manager: WorkflowManager) -> None:
    """Initialize the global WorkflowManager instance."""
    global _workflow_manager  # noqa: PLW0603
    _workflow_manager = manager


def close_workflow_manager() -> None:
    """Close every open workflow and drop the global WorkflowManager."""
    global _workflow_manager  # noqa: PLW0603
    if _workflow_manager is not None:
        _workflow_manager.close_all()
        _workflow_manager = None


def get_workflow_manager() -> Generator[WorkflowManager, None, None]:
    """Dependency that provides the WorkflowManager instance."""
    if _workflow_manager is None:
        raise RuntimeError("WorkflowManager not initialized. Call init_workflow_manager() first.")
    yield _workflow_manager


# Type alias for dependency injection
WorkflowManagerDep = Annotated[WorkflowManager, Depends(get_workflow_manager)]
