r"""Registry of the in-flight calls of one client instance.

Each orchestrated call registers one ``CancellationController`` when it
starts and deregisters it when it exits. ``cancel_all()`` reaches every call
that is registered at that moment.
"""

from __future__ import annotations

__all__ = ["ControllerRegistry"]

import logging
from typing import TYPE_CHECKING, Any

from aresfetch.cancellation import CancellationController

if TYPE_CHECKING:
    from collections.abc import Iterator

logger: logging.Logger = logging.getLogger(__name__)

GROUP_CANCEL_REASON = "cancel_all"


class ControllerRegistry:
    r"""Set of live cancellation controllers.

    Example:
        ```pycon
        >>> from aresfetch.registry import ControllerRegistry
        >>> registry = ControllerRegistry()
        >>> controller = registry.register()
        >>> len(registry)
        1
        >>> registry.cancel_all()
        1
        >>> controller.cancelled, len(registry)
        (True, 0)

        ```
    """

    def __init__(self) -> None:
        self._controllers: set[CancellationController] = set()

    def __len__(self) -> int:
        return len(self._controllers)

    def __contains__(self, controller: object) -> bool:
        return controller in self._controllers

    def __iter__(self) -> Iterator[CancellationController]:
        return iter(tuple(self._controllers))

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}(in_flight={len(self._controllers)})"

    def register(self) -> CancellationController:
        r"""Create, register and return a new controller."""
        controller = CancellationController()
        self._controllers.add(controller)
        return controller

    def deregister(self, controller: CancellationController) -> None:
        r"""Remove ``controller``. Unknown controllers are ignored."""
        self._controllers.discard(controller)

    def cancel_all(self, reason: Any = None) -> int:
        r"""Cancel every registered controller and clear the registry.

        Membership is snapshotted before cancelling, so calls that
        deregister while being cancelled cannot corrupt the iteration.

        Args:
            reason: The reason attached to each token. Defaults to
                ``"cancel_all"``.

        Returns:
            The number of controllers that were registered.
        """
        snapshot = tuple(self._controllers)
        self._controllers.clear()
        for controller in snapshot:
            controller.cancel(GROUP_CANCEL_REASON if reason is None else reason)
        if snapshot:
            logger.debug(f"cancelled {len(snapshot)} in-flight call(s)")
        return len(snapshot)
