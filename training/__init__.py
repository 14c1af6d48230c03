"""Training data collection, statistics and export."""

from .exporter import DatasetExporter, ExportFormat, ExportOptions, FILE_EXTENSIONS
from .refinery import DataRefinery, DocumentTextExtractor, OutputFormat, RefinedData, get_data_preview
from .schemas import PairInput, SessionStats
from .service import TrainerService
from .store import TrainingStore, READY_FOR_TRAINING_PAIRS
from .validator import PairValidationReport, PairValidator, validate_training_pair

__all__ = [
    "DatasetExporter",
    "ExportFormat",
    "ExportOptions",
    "FILE_EXTENSIONS",
    "DataRefinery",
    "DocumentTextExtractor",
    "OutputFormat",
    "RefinedData",
    "get_data_preview",
    "PairInput",
    "SessionStats",
    "TrainerService",
    "TrainingStore",
    "READY_FOR_TRAINING_PAIRS",
    "PairValidationReport",
    "PairValidator",
    "validate_training_pair",
]
