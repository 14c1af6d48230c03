"""Training sessions and the prompt/response pairs collected in them."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from core.errors import InvalidTransitionError, NotFoundError, ValidationError
from llm.pricing import estimate_cost
from llm.providers import recommended_minimum_pairs
from llm.router import resolve_provider
from storage.models import SessionStatus, TrainingPair, TrainingSession
from storage.repository import Repository
from .schemas import PairInput, SessionStats

logger = logging.getLogger(__name__)

MIN_QUALITY_SCORE = 1
MAX_QUALITY_SCORE = 5
HIGH_QUALITY_SCORE = 4
READY_FOR_TRAINING_PAIRS = 10

# Forward order of the non-failure states. FAILED is reachable from any
# non-terminal state; COMPLETED and FAILED are terminal.
_STATUS_RANK = {
    SessionStatus.PENDING: 0,
    SessionStatus.RUNNING: 1,
    SessionStatus.READY: 2,
    SessionStatus.COMPLETED: 3,
}
_TERMINAL = {SessionStatus.COMPLETED, SessionStatus.FAILED}


def validate_quality_score(score: Any) -> int:
    if isinstance(score, bool) or not isinstance(score, int):
        raise ValidationError("Quality score must be an integer between 1 and 5")
    if not MIN_QUALITY_SCORE <= score <= MAX_QUALITY_SCORE:
        raise ValidationError("Quality score must be between 1 and 5")
    return score


def can_transition(current: SessionStatus, target: SessionStatus) -> bool:
    if current in _TERMINAL:
        return False
    if target == SessionStatus.FAILED:
        return True
    return _STATUS_RANK[target] > _STATUS_RANK[current]


class TrainingStore:
    """CRUD and statistics for training sessions and pairs."""

    SESSIONS = "training_sessions"
    PAIRS = "training_results"

    def __init__(self, repo: Repository):
        self.repo = repo

    # ── Sessions ──────────────────────────────────────────────────────

    def create_session(self, project_id: str, model_id: Optional[str] = None) -> TrainingSession:
        if not project_id or not project_id.strip():
            raise ValidationError("Project id cannot be empty")
        row = self.repo.insert(self.SESSIONS, {
            "project_id": project_id,
            "model_id": model_id,
            "status": SessionStatus.PENDING.value,
            "progress": 0.0,
            "tokens_used": 0,
            "estimated_cost": 0.0,
        })
        logger.info(f"Created training session {row['id']} for project {project_id}")
        return TrainingSession.from_row(row)

    def _session_row(self, session_id: str) -> Dict[str, Any]:
        row = self.repo.get_by_id(self.SESSIONS, session_id)
        if row is None:
            raise NotFoundError(f"Training session not found: {session_id}")
        return row

    def get_session(self, session_id: str) -> TrainingSession:
        """Fetch a session with its token and cost totals recomputed from its pairs."""
        session = TrainingSession.from_row(self._session_row(session_id))
        session.tokens_used, session.estimated_cost = self.session_totals(session_id, session.model_id)
        return session

    def list_sessions(self, project_id: Optional[str] = None) -> List[TrainingSession]:
        filters = {"project_id": project_id} if project_id else None
        rows = self.repo.list(self.SESSIONS, filters, descending=True)
        return [TrainingSession.from_row(row) for row in rows]

    def delete_session(self, session_id: str) -> None:
        """Remove a session together with all of its pairs."""
        self._session_row(session_id)
        removed = self.repo.delete_where(self.PAIRS, {"session_id": session_id})
        self.repo.delete(self.SESSIONS, session_id)
        logger.info(f"Deleted training session {session_id} and {removed} pair(s)")

    def _transition(self, session_id: str, target: SessionStatus, **patch) -> TrainingSession:
        current = SessionStatus(self._session_row(session_id)["status"])
        if not can_transition(current, target):
            raise InvalidTransitionError(
                f"Cannot move training session from {current.value} to {target.value}"
            )
        row = self.repo.update(self.SESSIONS, session_id, {"status": target.value, **patch})
        logger.info(f"Training session {session_id}: {current.value} -> {target.value}")
        return TrainingSession.from_row(row)

    def mark_session_running(self, session_id: str) -> TrainingSession:
        return self._transition(session_id, SessionStatus.RUNNING, started_at=datetime.utcnow())

    def mark_session_ready(self, session_id: str) -> TrainingSession:
        return self._transition(session_id, SessionStatus.READY)

    def complete_session(self, session_id: str) -> TrainingSession:
        return self._transition(
            session_id, SessionStatus.COMPLETED, progress=100.0, completed_at=datetime.utcnow()
        )

    def fail_session(self, session_id: str, error_message: str) -> TrainingSession:
        return self._transition(
            session_id, SessionStatus.FAILED, error_message=error_message, completed_at=datetime.utcnow()
        )

    def update_progress(self, session_id: str, progress: float) -> TrainingSession:
        if not 0.0 <= progress <= 100.0:
            raise ValidationError("Progress must be between 0 and 100")
        self._session_row(session_id)
        return TrainingSession.from_row(self.repo.update(self.SESSIONS, session_id, {"progress": progress}))

    # ── Pairs ─────────────────────────────────────────────────────────

    def add_pair(self, session_id: str, pair: PairInput) -> TrainingPair:
        """Store a pair under a session. The rating may be left for later."""
        if pair.quality_score is not None:
            validate_quality_score(pair.quality_score)
        if not pair.prompt.strip():
            raise ValidationError("Prompt cannot be empty")
        if not pair.response.strip():
            raise ValidationError("Response cannot be empty")
        self._session_row(session_id)

        row = self.repo.insert(self.PAIRS, {
            "session_id": session_id,
            "input_text": pair.prompt,
            "output_text": pair.response,
            "quality_score": pair.quality_score,
            "tokens_used": pair.tokens_used,
        })
        return TrainingPair.from_row(row)

    def get_pair(self, pair_id: str) -> TrainingPair:
        row = self.repo.get_by_id(self.PAIRS, pair_id)
        if row is None:
            raise NotFoundError(f"Training pair not found: {pair_id}")
        return TrainingPair.from_row(row)

    def get_pairs(self, session_id: str) -> List[TrainingPair]:
        self._session_row(session_id)
        return [TrainingPair.from_row(row) for row in self.repo.list(self.PAIRS, {"session_id": session_id})]

    def update_quality_score(self, pair_id: str, score: int) -> TrainingPair:
        validate_quality_score(score)
        row = self.repo.update(self.PAIRS, pair_id, {"quality_score": score})
        if row is None:
            raise NotFoundError(f"Training pair not found: {pair_id}")
        return TrainingPair.from_row(row)

    def delete_pair(self, pair_id: str) -> bool:
        return self.repo.delete(self.PAIRS, pair_id)

    def clear_session(self, session_id: str) -> int:
        """Delete every pair in a session, keeping the session itself."""
        self._session_row(session_id)
        removed = self.repo.delete_where(self.PAIRS, {"session_id": session_id})
        logger.info(f"Cleared {removed} pair(s) from training session {session_id}")
        return removed

    # ── Aggregates ────────────────────────────────────────────────────

    def session_totals(self, session_id: str, model_id: Optional[str] = None) -> Tuple[int, float]:
        """Total tokens and estimated cost, summed over the session's pairs."""
        tokens = sum(pair.tokens_used for pair in self.get_pairs(session_id))
        cost = estimate_cost(resolve_provider(model_id), tokens) if model_id else 0.0
        return tokens, cost

    def get_stats(self, session_id: str) -> SessionStats:
        session = TrainingSession.from_row(self._session_row(session_id))
        pairs = self.get_pairs(session_id)

        scores = [p.quality_score for p in pairs if p.quality_score is not None]
        total_tokens = sum(p.tokens_used for p in pairs)
        high_quality = sum(1 for score in scores if score >= HIGH_QUALITY_SCORE)

        recommended = None
        cost = 0.0
        if session.model_id:
            provider = resolve_provider(session.model_id)
            recommended = recommended_minimum_pairs(provider)
            cost = estimate_cost(provider, total_tokens)

        return SessionStats(
            total_pairs=len(pairs),
            rated_pairs=len(scores),
            average_quality=sum(scores) / len(scores) if scores else 0.0,
            total_tokens=total_tokens,
            estimated_cost=cost,
            high_quality_pairs=high_quality,
            ready_for_training=high_quality >= READY_FOR_TRAINING_PAIRS,
            recommended_minimum=recommended,
        )
