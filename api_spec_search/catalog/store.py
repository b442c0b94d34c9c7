"""Process-scoped cache of parsed API descriptions and their catalog."""

import logging
import threading
from pathlib import Path
from typing import Callable, List, Optional, Union

from .operations import ApiCatalog, build_catalog
from .parser import APIParser, SpecFile

logger = logging.getLogger(__name__)

ResetListener = Callable[[], None]


class SpecStore:
    """Loads API descriptions from one directory and caches the result.

    Components that derive data from the catalog (the search index) register a
    listener with :meth:`on_reset` and are told whenever the cache is dropped.
    """

    def __init__(
        self,
        spec_dir: Union[str, Path],
        parser: Optional[APIParser] = None,
    ) -> None:
        """Initialize spec store.

        Args:
            spec_dir: Directory containing API description files
            parser: Optional parser instance
        """
        self.spec_dir = Path(spec_dir)
        self.parser = parser or APIParser()
        self._lock = threading.RLock()
        self._spec_files: Optional[List[SpecFile]] = None
        self._catalog: Optional[ApiCatalog] = None
        self._listeners: List[ResetListener] = []
        self._generation = 0

    def on_reset(self, listener: ResetListener) -> Callable[[], None]:
        """Register a reset listener.

        Args:
            listener: Callable invoked after every reset

        Returns:
            Callable that unregisters the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def load_spec_files(self, force_reload: bool = False) -> List[SpecFile]:
        """Get the parsed API descriptions, loading them on first use.

        Files are parsed without holding the store lock, so a concurrent
        :meth:`reset` never waits for a slow load. A load that started before
        a reset is returned to its caller but not cached.
        """
        if force_reload:
            self.reset()

        with self._lock:
            if self._spec_files is not None:
                return self._spec_files
            generation = self._generation

        spec_files = self.parser.parse_directory(self.spec_dir)

        with self._lock:
            if self._generation != generation:
                logger.debug(f"Discarding API files loaded before a reset of {self.spec_dir}")
                return spec_files
            if self._spec_files is None:
                self._spec_files = spec_files
            return self._spec_files

    def load_catalog(self, force_reload: bool = False) -> ApiCatalog:
        """Get the operation catalog, building it on first use."""
        if force_reload:
            self.reset()

        with self._lock:
            if self._catalog is not None:
                return self._catalog
            generation = self._generation

        catalog = build_catalog(self.load_spec_files())

        with self._lock:
            if self._generation != generation:
                return catalog
            if self._catalog is None:
                self._catalog = catalog
            return self._catalog

    def reset(self) -> None:
        """Drop cached documents and notify listeners."""
        with self._lock:
            self._generation += 1
            self._spec_files = None
            self._catalog = None
            listeners = list(self._listeners)

        logger.debug(f"Spec cache reset for {self.spec_dir}")
        for listener in listeners:
            try:
                listener()
            except Exception as e:
                logger.warning(f"Spec cache reset listener failed: {e}", exc_info=True)


__all__ = ["SpecStore", "ResetListener"]
