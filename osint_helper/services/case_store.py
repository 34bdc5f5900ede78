"""File-backed case store with an in-memory cache.

Each case lives in ``<cases_dir>/<caseId>.json``. The cache is filled once by
:meth:`CaseStore.load` at startup and is authoritative afterwards: reads never
touch the disk, and every mutation swaps the cached object before writing the
full record back.

Durable writes never raise. A failed write is logged and the cache keeps
the new value, so a restart after a failed write loses that mutation. This
store assumes a single process; there is no cross-process locking.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from osint_helper.models.case import Case, CaseCreate, now_ms
from osint_helper.utils.exceptions import CaseNotFoundError
from osint_helper.utils.logging import get_logger

logger = get_logger(__name__)

# Fields the store owns; callers cannot overwrite them through update_case.
_PROTECTED_FIELDS = frozenset({"case_id", "created_at", "updated_at"})


class CaseStore:
    """Owned case cache plus one JSON file per case."""

    def __init__(self, cases_dir: str | Path) -> None:
        self._dir = Path(cases_dir)
        self._cases: dict[str, Case] = {}
        self._loaded = False
        self._write_locks: dict[str, asyncio.Lock] = {}
        self._pending: set[asyncio.Task] = set()

    @property
    def cases_dir(self) -> Path:
        return self._dir

    @property
    def loaded(self) -> bool:
        return self._loaded

    # ── Warm-up ──────────────────────────────────────────────────────

    async def load(self) -> int:
        """Scan the cases directory once and fill the cache.

        Unreadable or invalid files are logged and skipped. Returns the number
        of cases in the cache.
        """
        if self._loaded:
            return len(self._cases)

        records = await asyncio.to_thread(self._read_all)
        for path, data in records:
            try:
                case = Case.model_validate(data)
            except ValueError as exc:
                logger.error("case_load_failed", path=str(path), error=str(exc))
                continue
            self._cases[case.case_id] = case

        self._loaded = True
        logger.info("cases_loaded", count=len(self._cases), cases_dir=str(self._dir))
        return len(self._cases)

    def _read_all(self) -> list[tuple[Path, Any]]:
        self._dir.mkdir(parents=True, exist_ok=True)
        records: list[tuple[Path, Any]] = []
        for path in sorted(self._dir.glob("*.json")):
            try:
                with open(path, encoding="utf-8") as f:
                    records.append((path, json.load(f)))
            except (OSError, json.JSONDecodeError) as exc:
                logger.error("case_load_failed", path=str(path), error=str(exc))
        return records

    # ── Reads ────────────────────────────────────────────────────────

    def get_case(self, case_id: str) -> Case | None:
        return self._cases.get(case_id)

    def require_case(self, case_id: str) -> Case:
        case = self._cases.get(case_id)
        if case is None:
            raise CaseNotFoundError(case_id)
        return case

    def list_cases(self) -> list[Case]:
        return sorted(self._cases.values(), key=lambda c: c.updated_at, reverse=True)

    # ── Mutations ────────────────────────────────────────────────────

    async def add_case(self, initial: CaseCreate, *, durable: bool = True) -> Case:
        """Stamp timestamps, cache the case and persist it.

        With ``durable=False`` the write runs in the background and the call
        returns as soon as the cache holds the case (see :meth:`flush`).
        """
        now = now_ms()
        case = Case(
            case_id=initial.case_id,
            task=initial.task,
            generated_queries=list(initial.generated_queries),
            collected_data=list(initial.collected_data),
            analysis=initial.analysis,
            created_at=now,
            updated_at=now,
        )
        self._cases[case.case_id] = case
        logger.info("case_created", case_id=case.case_id)
        await self._persist(case.case_id, durable)
        return case

    async def update_case(self, case_id: str, *, durable: bool = True, **fields: Any) -> Case:
        """Shallow-merge ``fields`` into the cached case and persist it.

        Each given field replaces the old value wholesale.

        Raises:
            CaseNotFoundError: the case is not in the cache. Nothing is written.
        """
        existing = self._cases.get(case_id)
        if existing is None:
            raise CaseNotFoundError(case_id)

        protected = _PROTECTED_FIELDS.intersection(fields)
        if protected:
            raise ValueError(f"Cannot update store-managed fields: {', '.join(sorted(protected))}")
        unknown = set(fields) - set(Case.model_fields)
        if unknown:
            raise ValueError(f"Unknown case fields: {', '.join(sorted(unknown))}")

        merged = existing.model_dump()
        merged.update(fields)
        merged["updated_at"] = max(now_ms(), existing.updated_at)
        updated = Case.model_validate(merged)

        self._cases[case_id] = updated
        await self._persist(case_id, durable)
        return updated

    async def delete_case(self, case_id: str) -> bool:
        """Drop the case from the cache and best-effort remove its file.

        Returns whether the case was cached.
        """
        existed = self._cases.pop(case_id, None) is not None
        lock = self._lock_for(case_id)
        async with lock:
            try:
                await asyncio.to_thread(self._path(case_id).unlink, missing_ok=True)
            except OSError as exc:
                logger.warning("case_file_delete_failed", case_id=case_id, error=str(exc))
        self._write_locks.pop(case_id, None)
        logger.info("case_deleted", case_id=case_id, existed=existed)
        return existed

    async def flush(self) -> None:
        """Wait for every background write started with ``durable=False``."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ── Persistence ──────────────────────────────────────────────────

    def _path(self, case_id: str) -> Path:
        return self._dir / f"{case_id}.json"

    def _lock_for(self, case_id: str) -> asyncio.Lock:
        lock = self._write_locks.get(case_id)
        if lock is None:
            lock = self._write_locks[case_id] = asyncio.Lock()
        return lock

    async def _persist(self, case_id: str, durable: bool) -> None:
        if durable:
            await self._save(case_id)
            return
        task = asyncio.create_task(self._save(case_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _save(self, case_id: str) -> bool:
        # Writes are serialized per case and always take the latest cached
        # value, so an older write can never land after a newer one.
        async with self._lock_for(case_id):
            case = self._cases.get(case_id)
            if case is None:
                return False
            try:
                await asyncio.to_thread(self._write_file, case)
            except (OSError, TypeError, ValueError) as exc:
                logger.error("case_save_failed", case_id=case_id, error=str(exc))
                return False
            logger.debug("case_saved", case_id=case_id, updated_at=case.updated_at)
            return True

    def _write_file(self, case: Case) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{case.case_id}.", suffix=".tmp", dir=self._dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(case.to_record(), f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_name, self._path(case.case_id))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
