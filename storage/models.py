"""Data models for the storage layer."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class SessionStatus(str, Enum):
    """Lifecycle states of a training session, in forward order."""
    PENDING = "pending"
    RUNNING = "running"
    READY = "ready"
    COMPLETED = "completed"
    FAILED = "failed"


class ProcessingStatus(str, Enum):
    """Text extraction states of an uploaded document."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Credential:
    """An owner's API key for one provider."""
    id: str
    owner_id: str
    provider: str
    api_key: str
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Credential":
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            provider=row["provider"],
            api_key=row["api_key"],
            is_active=bool(row["is_active"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


@dataclass
class CredentialStatus:
    """Public view of a stored credential. Never carries the secret."""
    provider: str
    has_key: bool
    is_active: bool
    last_updated: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "hasKey": self.has_key,
            "isActive": self.is_active,
            "lastUpdated": self.last_updated.isoformat() if self.last_updated else None,
        }


@dataclass
class TrainingSession:
    """A collection of training pairs assembled for one project."""
    id: str
    owner_id: str
    project_id: str
    model_id: Optional[str] = None
    status: SessionStatus = SessionStatus.PENDING
    progress: float = 0.0
    tokens_used: int = 0
    estimated_cost: float = 0.0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TrainingSession":
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            project_id=row["project_id"],
            model_id=row.get("model_id"),
            status=SessionStatus(row["status"]),
            progress=row.get("progress") or 0.0,
            tokens_used=row.get("tokens_used") or 0,
            estimated_cost=row.get("estimated_cost") or 0.0,
            started_at=row.get("started_at"),
            completed_at=row.get("completed_at"),
            error_message=row.get("error_message"),
            created_at=row["created_at"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "modelId": self.model_id,
            "status": self.status.value,
            "progress": self.progress,
            "tokensUsed": self.tokens_used,
            "estimatedCost": self.estimated_cost,
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "errorMessage": self.error_message,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass
class TrainingPair:
    """One stored input/output example with an optional 1-5 rating."""
    id: str
    owner_id: str
    session_id: str
    input_text: str
    output_text: str
    quality_score: Optional[int] = None
    tokens_used: int = 0
    created_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TrainingPair":
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            session_id=row["session_id"],
            input_text=row["input_text"],
            output_text=row["output_text"],
            quality_score=row.get("quality_score"),
            tokens_used=row.get("tokens_used") or 0,
            created_at=row["created_at"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "prompt": self.input_text,
            "response": self.output_text,
            "qualityScore": self.quality_score,
            "tokensUsed": self.tokens_used,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass
class UploadedFile:
    """A document registered for text extraction."""
    id: str
    owner_id: str
    file_name: str
    file_type: str
    file_size: int
    project_id: Optional[str] = None
    extracted_text: Optional[str] = None
    processing_status: ProcessingStatus = ProcessingStatus.PENDING
    error_message: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "UploadedFile":
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            file_name=row["file_name"],
            file_type=row["file_type"],
            file_size=row["file_size"],
            project_id=row.get("project_id"),
            extracted_text=row.get("extracted_text"),
            processing_status=ProcessingStatus(row["processing_status"]),
            error_message=row.get("error_message"),
            created_at=row["created_at"],
        )
