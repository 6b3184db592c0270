"""Orphaned asset queue (repository pattern).

Append-only from the rollback path, drained only by the sweep. Stores must be
swappable: a JSON file for a single process, memory for tests.
"""

import asyncio
import json
import logging
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Iterable, List, Optional

from eventify.config import ORPHAN_QUEUE_PATH, ORPHAN_SWEEP_DELAY_SECONDS

logger = logging.getLogger(__name__)

DeleteFn = Callable[["OrphanedAsset"], Awaitable[None]]


@dataclass(frozen=True)
class OrphanedAsset:
    """An uploaded image whose compensating delete failed."""

    url: str
    endpoint: str
    pathname: str = ""
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass(frozen=True)
class SweepResult:
    success: int = 0
    failed: int = 0


class OrphanAssetRepository(ABC):
    """Interface for the orphaned asset queue."""

    @abstractmethod
    def append(self, asset: OrphanedAsset) -> None:
        """Queue an asset for later deletion."""
        ...

    @abstractmethod
    def entries(self) -> List[OrphanedAsset]:
        """Return a snapshot of the queued assets, oldest first."""
        ...

    @abstractmethod
    def discard(self, ids: Iterable[str]) -> None:
        """Remove the given entries; unknown ids are ignored."""
        ...

    async def drain_attempting(
        self,
        delete_fn: DeleteFn,
        delay: float = ORPHAN_SWEEP_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> SweepResult:
        """
        Attempts `delete_fn` once per queued entry, pausing `delay` between attempts.
        Successes leave the queue, failures stay for a future sweep. Entries
        appended while the sweep runs are not touched.
        """
        snapshot = self.entries()
        if not snapshot:
            return SweepResult()

        deleted: List[str] = []
        failed = 0
        for asset in snapshot:
            try:
                await delete_fn(asset)
                deleted.append(asset.id)
            except Exception:
                failed += 1
                logger.warning("orphans.sweep delete failed url=%s endpoint=%s", asset.url, asset.endpoint, exc_info=True)
            await sleep(delay)

        self.discard(deleted)
        logger.info("orphans.sweep success=%s failed=%s", len(deleted), failed)
        return SweepResult(success=len(deleted), failed=failed)


class InMemoryOrphanRepository(OrphanAssetRepository):
    def __init__(self, assets: Optional[Iterable[OrphanedAsset]] = None) -> None:
        self._assets: List[OrphanedAsset] = list(assets or [])

    def append(self, asset: OrphanedAsset) -> None:
        self._assets.append(asset)

    def entries(self) -> List[OrphanedAsset]:
        return list(self._assets)

    def discard(self, ids: Iterable[str]) -> None:
        drop = set(ids)
        self._assets = [a for a in self._assets if a.id not in drop]


# Process-wide holder for entries the durable queue could not store
unpersisted_orphans = InMemoryOrphanRepository()


class JsonFileOrphanRepository(OrphanAssetRepository):
    """
    Durable queue stored as a JSON list. Every operation reads the file again,
    so several repositories on the same path see the same queue.
    """

    def __init__(self, path: Path = ORPHAN_QUEUE_PATH) -> None:
        self.path = Path(path)

    def _load(self) -> List[OrphanedAsset]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except (OSError, ValueError):
            logger.exception("orphans.load failed path=%s, treating queue as empty", self.path)
            return []
        assets = []
        for item in raw if isinstance(raw, list) else []:
            try:
                assets.append(OrphanedAsset(**item))
            except TypeError:
                logger.warning("orphans.load skipping malformed entry %r", item)
        return assets

    def _save(self, assets: List[OrphanedAsset]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps([asdict(a) for a in assets]), encoding="utf-8")
        tmp.replace(self.path)

    def append(self, asset: OrphanedAsset) -> None:
        assets = self._load()
        assets.append(asset)
        self._save(assets)

    def entries(self) -> List[OrphanedAsset]:
        return self._load()

    def discard(self, ids: Iterable[str]) -> None:
        drop = set(ids)
        if not drop:
            return
        self._save([a for a in self._load() if a.id not in drop])


async def sweep_orphaned_assets(
    repository: OrphanAssetRepository,
    delete_fn: DeleteFn,
    delay: float = ORPHAN_SWEEP_DELAY_SECONDS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> SweepResult:
    """
    Best-effort batch cleanup of the orphan queue, invoked opportunistically.
    Never raises for individual failures; safe to call redundantly.
    """
    try:
        return await repository.drain_attempting(delete_fn, delay=delay, sleep=sleep)
    except (OSError, ValueError):
        logger.exception("orphans.sweep batch cleanup failed")
        return SweepResult()
