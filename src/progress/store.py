"""
Progress store: persisted learner settings and attempt history.

Stores everything in one JSON file, aggregates results for review, and
optionally forwards each new result to a remote scoring log through a
sync queue.
"""

import json
import logging
import math
from pathlib import Path
from typing import Iterable, List, Optional, Union

from pydantic import ValidationError

from src.progress.types import (
    ProblemStats,
    ProgressConfig,
    ProgressMeta,
    ProgressState,
    ProgressStats,
    ResultEntry,
    ReviewMode,
)
from src.sync.queue import SyncQueue
from src.utils.device import guess_device, now_ms
from src.utils.io import load_json, save_json

logger = logging.getLogger(__name__)

WRONG_PASS_RATE = 0.6


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


class ProgressStore:
    """
    JSON-file backed learner history.

    Example:
        >>> store = ProgressStore(Path("progress.json"))
        >>> store.record_result("漢", 72.4, passed=True)
        >>> store.get_stats().pass_rate
        100
    """

    def __init__(self, path: Union[str, Path], sync_queue: Optional[SyncQueue] = None):
        """
        Args:
            path: JSON file holding the state. Created on first write.
            sync_queue: Optional queue forwarding results to a remote log.
        """
        self.path = Path(path)
        self.sync_queue = sync_queue
        self.state = self._load() or ProgressState()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_config(self) -> ProgressConfig:
        return self.state.config.model_copy()

    def save_config(self, **partial) -> ProgressConfig:
        """
        Merge partial settings into the stored configuration.

        Raises:
            ValueError: If a value fails validation or the key is unknown.
        """
        unknown = set(partial) - set(ProgressConfig.model_fields)
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        merged = {**self.state.config.model_dump(), **partial}
        self.state.config = ProgressConfig(**merged)
        self._commit()
        return self.get_config()

    # ------------------------------------------------------------------
    # Results and history
    # ------------------------------------------------------------------

    def record_result(
        self,
        problem: str,
        score_pct: float,
        passed: bool,
        duration_ms: Optional[int] = None,
        device: Optional[str] = None,
        pack: Optional[str] = None,
        notes: str = "",
    ) -> ResultEntry:
        """
        Append one attempt to the problem's history.

        When a sync queue with a remote endpoint is attached, the entry is
        queued as a ``result`` event and a flush is attempted.

        Args:
            problem: Problem key (the character being practised).
            score_pct: Score 0-100; stored rounded half-up.
            passed: Pass/fail decision of the attempt.
            duration_ms: Time spent drawing.
            device: Device family; guessed from the host when None.
            pack: Problem pack; defaults to the configured pack.
            notes: Free-form notes.

        Returns:
            The stored ResultEntry.
        """
        entry = ResultEntry(
            ts=now_ms(),
            score_pct=round_half_up(score_pct),
            passed=bool(passed),
            duration_ms=duration_ms,
            device=device or guess_device(),
            pack=pack or self.state.config.pack or "default",
            notes=notes,
        )
        self.state.results.setdefault(problem, []).append(entry)
        self._commit()
        logger.info(
            f"Recorded result for {problem!r}: {entry.score_pct}% "
            f"({'pass' if entry.passed else 'fail'})"
        )

        if self.sync_queue is not None and self.sync_queue.endpoint is not None:
            self.sync_queue.enqueue(
                "result", problem, entry.model_dump(by_alias=True)
            )
            self.sync_queue.flush()

        return entry

    def get_history(self, problem: str, limit: int = 50) -> List[ResultEntry]:
        """Attempts for one problem, newest first."""
        history = list(reversed(self.state.results.get(problem, [])))
        return [e.model_copy() for e in history[:limit]]

    def get_stats(self) -> ProgressStats:
        """Aggregate pass rate and average score, overall and per problem."""
        entries = [e for arr in self.state.results.values() for e in arr]
        total = len(entries)
        passed = sum(1 for e in entries if e.passed)
        avg = round_half_up(sum(e.score_pct for e in entries) / total) if total else 0

        per_problem = []
        for problem, arr in self.state.results.items():
            if not arr:
                continue
            count = len(arr)
            problem_passed = sum(1 for e in arr if e.passed)
            per_problem.append(
                ProblemStats(
                    problem=problem,
                    count=count,
                    avg=round_half_up(sum(e.score_pct for e in arr) / count),
                    pass_rate=round_half_up(problem_passed / count * 100),
                )
            )
        per_problem.sort(key=lambda s: (s.pass_rate, s.avg))

        return ProgressStats(
            total=total,
            passed=passed,
            pass_rate=round_half_up(passed / total * 100) if total else 0,
            avg=avg,
            per_problem=per_problem,
        )

    def get_review_set(
        self,
        mode: Union[ReviewMode, str] = ReviewMode.WRONG,
        limit: int = 20,
        min_trials: int = 2,
        score_below: float = 70,
        problems: Optional[Iterable[str]] = None,
    ) -> List[str]:
        """
        Select problems worth practising again.

        Args:
            mode: ``wrong`` (pass rate below 60%), ``low_score`` (average
                below score_below) or ``new`` (no attempts yet).
            limit: Maximum number of problems returned.
            min_trials: Attempts needed before wrong/low_score consider a
                problem.
            score_below: Average cut-off for low_score.
            problems: For ``new``, the full problem list to check against
                the history. Without it only problems with an empty history
                qualify.

        Returns:
            Problem keys in history order (or in ``problems`` order).

        Raises:
            ValueError: If mode is not a known review mode.
        """
        mode = ReviewMode(mode)
        results = self.state.results
        selected: List[str] = []

        if mode == ReviewMode.NEW:
            candidates = list(problems) if problems is not None else list(results)
            selected = [p for p in candidates if not results.get(p)]

        elif mode == ReviewMode.WRONG:
            for problem, arr in results.items():
                tried = len(arr)
                rate = sum(1 for e in arr if e.passed) / tried if tried else 1.0
                if tried >= min_trials and rate < WRONG_PASS_RATE:
                    selected.append(problem)

        elif mode == ReviewMode.LOW_SCORE:
            for problem, arr in results.items():
                if not arr:
                    continue
                avg = round_half_up(sum(e.score_pct for e in arr) / len(arr))
                if avg < score_below and len(arr) >= min_trials:
                    selected.append(problem)

        return selected[:limit]

    # ------------------------------------------------------------------
    # Data management
    # ------------------------------------------------------------------

    def export_json(self) -> str:
        """Serialize the full state."""
        return self.state.model_dump_json()

    def import_json(self, text: str) -> None:
        """
        Replace the state with an exported payload.

        Settings are merged over the defaults and ``updated_at`` is
        refreshed.

        Raises:
            ValueError: If the payload is not JSON or lacks config/results.
        """
        try:
            obj = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Import payload is not valid JSON: {e}") from e

        if (
            not isinstance(obj, dict)
            or not isinstance(obj.get("config"), dict)
            or obj.get("results") is None
        ):
            raise ValueError("Import payload must contain 'config' and 'results'")

        try:
            state = ProgressState(
                config=ProgressConfig(**{**ProgressConfig().model_dump(), **obj["config"]}),
                results=obj["results"],
                meta=ProgressMeta(**{**ProgressMeta().model_dump(), **obj.get("meta", {})}),
            )
        except (TypeError, ValidationError) as e:
            raise ValueError(f"Import payload is invalid: {e}") from e

        self.state = state
        self._commit()
        logger.info(f"Imported progress for {len(state.results)} problems")

    def reset_all(self) -> None:
        """Discard all settings and history."""
        self.state = ProgressState()
        self._commit()
        logger.info("Progress store reset")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> Optional[ProgressState]:
        if not self.path.exists():
            return None
        try:
            return ProgressState.model_validate(load_json(self.path))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable progress file {self.path}: {e}")
            return None

    def _commit(self) -> None:
        self.state.meta.updated_at = now_ms()
        save_json(self.state.model_dump(mode="json"), self.path)
