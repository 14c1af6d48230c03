"""Turns uploaded documents into line-oriented training records."""

import csv
import io
import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Protocol

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from core.errors import ExtractionError, NotFoundError
from storage.models import ProcessingStatus, UploadedFile
from storage.repository import Repository

logger = logging.getLogger(__name__)

RECORD_SOURCE = "pdf_extraction"
PDF_MIME_TYPE = "application/pdf"


class OutputFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


class TextExtractor(Protocol):
    def extract(self, data: bytes, file_type: str) -> str:
        """Return the document's text, or raise ExtractionError."""


class DocumentTextExtractor:
    """Extracts text from PDFs with pypdf and decodes plain-text uploads."""

    def extract(self, data: bytes, file_type: str) -> str:
        if file_type == PDF_MIME_TYPE:
            text = self._extract_pdf(data)
        elif file_type.startswith("text/"):
            try:
                text = data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ExtractionError(f"Text file is not valid UTF-8: {e}") from e
        else:
            raise ExtractionError(f"Unsupported file type: {file_type}")

        if not text.strip():
            raise ExtractionError("No extractable text found in document")
        return text.strip()

    def _extract_pdf(self, data: bytes) -> str:
        try:
            reader = PdfReader(io.BytesIO(data))
            return "\n".join(page.extract_text() or "" for page in reader.pages)
        except PdfReadError as e:
            raise ExtractionError(f"Could not read PDF: {e}") from e


@dataclass
class RefineryProgress:
    stage: str
    progress: int
    message: str


@dataclass
class RefinedData:
    file_id: str
    extracted_text: str
    formatted_data: str
    format: OutputFormat
    record_count: int
    processing_time: float


def _lines(text: str) -> List[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def format_as_json(text: str, timestamp: Optional[datetime] = None) -> str:
    """One JSON record per non-blank line."""
    stamp = (timestamp or datetime.utcnow()).isoformat()
    records = [
        {"id": index, "text": line, "source": RECORD_SOURCE, "timestamp": stamp}
        for index, line in enumerate(_lines(text), 1)
    ]
    return json.dumps(records, indent=2, ensure_ascii=False)


def format_as_csv(text: str, timestamp: Optional[datetime] = None) -> str:
    """One CSV row per non-blank line, under an ``id,text,source,timestamp`` header."""
    stamp = (timestamp or datetime.utcnow()).isoformat()
    buffer = io.StringIO()
    buffer.write("id,text,source,timestamp\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for index, line in enumerate(_lines(text), 1):
        writer.writerow([index, line, RECORD_SOURCE, stamp])
    return buffer.getvalue()


def get_data_preview(formatted_data: str, max_chars: int = 500) -> str:
    if len(formatted_data) <= max_chars:
        return formatted_data
    return formatted_data[:max_chars] + "\n... (truncated)"


class DataRefinery:
    """Tracks uploaded documents through extraction and formatting."""

    TABLE = "uploaded_files"

    def __init__(self, repo: Repository, extractor: Optional[TextExtractor] = None):
        self.repo = repo
        self.extractor = extractor or DocumentTextExtractor()

    def register_file(
        self,
        file_name: str,
        file_size: int,
        file_type: str = PDF_MIME_TYPE,
        project_id: Optional[str] = None,
    ) -> UploadedFile:
        row = self.repo.insert(self.TABLE, {
            "file_name": file_name,
            "file_type": file_type,
            "file_size": file_size,
            "project_id": project_id,
            "processing_status": ProcessingStatus.PENDING.value,
        })
        return UploadedFile.from_row(row)

    def get_processing_status(self, file_id: str) -> UploadedFile:
        row = self.repo.get_by_id(self.TABLE, file_id)
        if row is None:
            raise NotFoundError(f"File not found: {file_id}")
        return UploadedFile.from_row(row)

    def list_files(self) -> List[UploadedFile]:
        return [UploadedFile.from_row(row) for row in self.repo.list(self.TABLE, descending=True)]

    def delete_file(self, file_id: str) -> bool:
        return self.repo.delete(self.TABLE, file_id)

    def extract_text(self, file_id: str, data: bytes) -> str:
        """Extract and store a document's text, recording failures on the file."""
        uploaded = self.get_processing_status(file_id)
        self.repo.update(self.TABLE, file_id, {"processing_status": ProcessingStatus.PROCESSING.value})

        try:
            text = self.extractor.extract(data, uploaded.file_type)
        except ExtractionError as e:
            logger.error(f"Text extraction failed for {uploaded.file_name}: {e}")
            self.repo.update(self.TABLE, file_id, {
                "processing_status": ProcessingStatus.FAILED.value,
                "error_message": str(e),
            })
            raise

        self.repo.update(self.TABLE, file_id, {
            "extracted_text": text,
            "processing_status": ProcessingStatus.COMPLETED.value,
            "error_message": None,
        })
        return text

    def refine(
        self,
        file_id: str,
        data: bytes,
        output_format: OutputFormat = OutputFormat.JSON,
        on_progress: Optional[Callable[[RefineryProgress], None]] = None,
    ) -> RefinedData:
        start = time.monotonic()

        def report(stage: str, progress: int, message: str) -> None:
            if on_progress:
                on_progress(RefineryProgress(stage, progress, message))

        report("extracting", 33, "Extracting text from document...")
        text = self.extract_text(file_id, data)

        report("formatting", 66, f"Formatting as {output_format.value.upper()}...")
        formatted = format_as_json(text) if output_format == OutputFormat.JSON else format_as_csv(text)

        report("complete", 100, "Data ready!")
        return RefinedData(
            file_id=file_id,
            extracted_text=text,
            formatted_data=formatted,
            format=output_format,
            record_count=len(_lines(text)),
            processing_time=time.monotonic() - start,
        )
