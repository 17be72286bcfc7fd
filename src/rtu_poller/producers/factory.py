from __future__ import annotations

import importlib
import logging
import pkgutil
from dataclasses import dataclass
from types import ModuleType
from typing import Iterable

import rtu_poller.producers as producers_pkg
from rtu_poller.errors import ConfigurationError
from rtu_poller.producers.producer import Producer

log = logging.getLogger(__name__)


@dataclass
class DiscoveredProducer:
    """Metadata describing a producer package discovered by the factory."""
    name: str
    module: ModuleType
    producer: Producer


class ProducerFactory:
    """Factory that discovers the producer packages.

    Contract for each producer package (e.g., rtu_poller.producers.sdm):
    - Must be a Python package (contains __init__.py)
    - Expose a `PRODUCER` attribute referencing a Producer subclass
    """

    def __init__(self) -> None:
        self._producers: dict[str, DiscoveredProducer] = {}
        self._discover_producers()

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._producers)

    def _discover_producers(self) -> None:
        self._producers.clear()

        # Iterate first-level subpackages under rtu_poller.producers
        for _, name, ispkg in pkgutil.iter_modules(producers_pkg.__path__):
            if not ispkg:
                continue

            fqmn = f"{producers_pkg.__name__}.{name}"

            try:
                module = importlib.import_module(fqmn)
            except Exception as exc:
                log.exception("Failed to import producer package %s", fqmn, exc_info=exc)
                continue

            producer_cls = getattr(module, "PRODUCER", None)

            if not isinstance(producer_cls, type) or not issubclass(producer_cls, Producer):
                log.error("Skipping %s (missing PRODUCER)", fqmn)
                continue

            self._producers[name] = DiscoveredProducer(
                name=name, module=module, producer=producer_cls()
            )

        # Stable order: sort by name for deterministic behavior
        self._producers = dict(sorted(self._producers.items()))

    def get(self, name: str) -> Producer:
        try:
            return self._producers[name].producer
        except KeyError:
            raise ConfigurationError(
                f"Unknown producer '{name}'. "
                f"Valid values are: {', '.join(self.names)}."
            ) from None

    def ordered(self, order: Iterable[str] = ()) -> list[Producer]:
        """
        The producers in probing order.
        The named ones come first, in the given order, then all the others.
        """
        names = list(dict.fromkeys(order))
        retval = [self.get(name) for name in names]
        retval.extend(
            d.producer for n, d in self._producers.items() if n not in names
        )

        return retval


# Singleton instance for convenience
factory = ProducerFactory()
