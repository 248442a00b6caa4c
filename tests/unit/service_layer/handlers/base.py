"""Base class for handler tests."""

from __future__ import annotations

from types import SimpleNamespace
from typing import TYPE_CHECKING

import pytest

from accountcore.interfaces.cancellation import CancellationToken

if TYPE_CHECKING:
    from accountcore.domain.entity import Entity
    from accountcore.service_layer.commands import Command
    from accountcore.service_layer.messagebus import MessageBus
    from accountcore.service_layer.result import Result

    from .fakes import TestBus


class HandlerTestBase:
    """Base class for handler tests providing common setup and utilities."""

    test_bus: TestBus
    bus: MessageBus

    # declare what fixtures seeding needs (subclasses can override)
    seed_uses: tuple[str, ...] = ()
    fx: SimpleNamespace

    @pytest.fixture(autouse=True)
    def _attach_bus(self, request, make_test_bus):
        """Fresh bus per test; seed using any fixtures declared in seed_uses."""
        self.test_bus = make_test_bus()
        self.bus = self.test_bus.bus

        # Make a handy namespace of requested fixtures available as self.fx
        fx = {name: request.getfixturevalue(name) for name in self.seed_uses}
        self.fx = SimpleNamespace(**fx)

        self._seed_bus(request)  # generic: can pull *any* fixture by name
        self.reset_committed()

    def _seed_bus(self, request) -> None:
        """Override to preload the store. Use request.getfixturevalue(...) as needed."""

    # --- helpers ---

    def handle(self, cmd: Command, token: CancellationToken | None = None) -> Result:
        """Send a command through the bus."""
        return self.bus.handle(cmd, token or CancellationToken.none())

    def seed(self, *entities: Entity) -> None:
        """Commit entities straight into the store (bypassing handlers)."""
        with self.test_bus.uow() as uow:
            for entity in entities:
                repo = uow.users if hasattr(entity, "tenant_id") else uow.tenants
                repo.add(entity)
            uow.commit()

    def load(self, repo_name: str, entity_id):
        """Read an entity's committed state in a fresh unit of work."""
        with self.test_bus.uow() as uow:
            return getattr(uow, repo_name).get_by_id(
                entity_id, CancellationToken.none()
            )

    def assert_committed(self) -> None:
        """Assert that a unit of work was committed."""
        assert self.test_bus.recorder.commits > 0

    def assert_not_committed(self) -> None:
        """Assert that no unit of work was committed."""
        assert self.test_bus.recorder.commits == 0

    def reset_committed(self) -> None:
        """Reset the commit counter."""
        self.test_bus.recorder.commits = 0
