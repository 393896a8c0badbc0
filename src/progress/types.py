"""Pydantic models for the progress store.

Persisted learner state: preferences, per-problem attempt history and
aggregate statistics derived from that history.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.utils.device import now_ms

SCHEMA_VERSION = 1


class ReviewMode(str, Enum):
    """Selection rule for a review set."""

    WRONG = "wrong"  # Tried often enough, pass rate below 60%
    LOW_SCORE = "low_score"  # Tried often enough, average below a cut-off
    NEW = "new"  # Never attempted


class ProgressConfig(BaseModel):
    """Learner preferences.

    Attributes:
        pen_width: Stroke width of the drawing surface in pixels.
        threshold_pct: Score (0-100) needed to pass an attempt.
        show_grid: Draw the guide grid behind the canvas.
        erase_mode: Start the drawing surface in eraser mode.
        pack: Name of the active problem pack.
    """

    pen_width: int = Field(default=14, ge=1)
    threshold_pct: float = Field(default=65.0, ge=0.0, le=100.0)
    show_grid: bool = True
    erase_mode: bool = False
    pack: str = "default"


class ResultEntry(BaseModel):
    """One graded attempt.

    Stored under the field names; serialized with ``by_alias=True`` it
    takes the camelCase shape the remote scoring log expects
    (``scorePct``, ``pass``, ``durationMs``).

    Attributes:
        ts: Attempt time in epoch milliseconds.
        score_pct: Score 0-100, rounded to an integer.
        passed: Whether the attempt passed.
        duration_ms: Time spent drawing, if known.
        device: Coarse device family.
        pack: Problem pack the attempt belongs to.
        notes: Free-form notes.
    """

    model_config = ConfigDict(populate_by_name=True)

    ts: int
    score_pct: int = Field(ge=0, le=100, alias="scorePct")
    passed: bool = Field(alias="pass")
    duration_ms: Optional[int] = Field(default=None, alias="durationMs")
    device: str = "Other"
    pack: str = "default"
    notes: str = ""


class ProgressMeta(BaseModel):
    """Bookkeeping for the persisted state."""

    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)
    schema_version: int = SCHEMA_VERSION


class ProgressState(BaseModel):
    """Everything the progress store persists."""

    config: ProgressConfig = Field(default_factory=ProgressConfig)
    results: Dict[str, List[ResultEntry]] = Field(default_factory=dict)
    meta: ProgressMeta = Field(default_factory=ProgressMeta)


class ProblemStats(BaseModel):
    """Aggregate for a single problem."""

    problem: str
    count: int
    avg: int
    pass_rate: int


class ProgressStats(BaseModel):
    """Aggregate over all attempts, with the per-problem breakdown sorted
    weakest first (lowest pass rate, then lowest average)."""

    total: int
    passed: int
    pass_rate: int
    avg: int
    per_problem: List[ProblemStats]
