"""Encodes a session's training pairs into fine-tuning dataset formats."""

import csv
import io
import json
import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storage.models import TrainingPair
from .store import TrainingStore

logger = logging.getLogger(__name__)

CSV_HEADER = "prompt,response,quality_score,tokens_used"


class ExportFormat(str, Enum):
    """Output encodings, named after the fine-tuning service they target."""
    OPENAI = "openai"        # chat-message JSONL
    ANTHROPIC = "anthropic"  # annotated JSON
    CSV = "csv"
    GENERIC = "generic"      # generic JSON


FILE_EXTENSIONS = {
    ExportFormat.OPENAI: "jsonl",
    ExportFormat.ANTHROPIC: "json",
    ExportFormat.CSV: "csv",
    ExportFormat.GENERIC: "json",
}


class ExportOptions(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    format: ExportFormat = ExportFormat.GENERIC
    min_quality: Optional[int] = Field(default=None, ge=1, le=5)


def filter_by_quality(pairs: Iterable[TrainingPair], min_quality: Optional[int]) -> List[TrainingPair]:
    """Keep pairs rated at least ``min_quality``; unrated pairs never pass."""
    if min_quality is None:
        return list(pairs)
    return [p for p in pairs if p.quality_score is not None and p.quality_score >= min_quality]


def to_chat_jsonl(pairs: List[TrainingPair]) -> str:
    return "\n".join(
        json.dumps(
            {
                "messages": [
                    {"role": "user", "content": pair.input_text},
                    {"role": "assistant", "content": pair.output_text},
                ]
            },
            ensure_ascii=False,
        )
        for pair in pairs
    )


def to_annotated_json(pairs: List[TrainingPair]) -> str:
    examples = [
        {"input": pair.input_text, "output": pair.output_text, "quality": pair.quality_score}
        for pair in pairs
    ]
    return json.dumps(examples, indent=2, ensure_ascii=False)


def to_csv(pairs: List[TrainingPair]) -> str:
    buffer = io.StringIO()
    buffer.write(CSV_HEADER + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for pair in pairs:
        writer.writerow([pair.input_text, pair.output_text, pair.quality_score or 0, pair.tokens_used or 0])
    return buffer.getvalue()


def to_generic_json(pairs: List[TrainingPair]) -> str:
    data = [
        {
            "prompt": pair.input_text,
            "response": pair.output_text,
            "qualityScore": pair.quality_score,
            "tokensUsed": pair.tokens_used,
            "createdAt": pair.created_at.isoformat(),
        }
        for pair in pairs
    ]
    return json.dumps(data, indent=2, ensure_ascii=False)


ENCODERS: Dict[ExportFormat, Callable[[List[TrainingPair]], str]] = {
    ExportFormat.OPENAI: to_chat_jsonl,
    ExportFormat.ANTHROPIC: to_annotated_json,
    ExportFormat.CSV: to_csv,
    ExportFormat.GENERIC: to_generic_json,
}


class DatasetExporter:
    """Reads a session's pairs and returns them as one encoded string."""

    def __init__(self, store: TrainingStore):
        self.store = store

    def export(self, session_id: str, options: Optional[ExportOptions] = None) -> str:
        options = options or ExportOptions()
        pairs = filter_by_quality(self.store.get_pairs(session_id), options.min_quality)
        encoded = ENCODERS[options.format](pairs)
        logger.info(f"Exported {len(pairs)} pair(s) from session {session_id} as {options.format.value}")
        return encoded
