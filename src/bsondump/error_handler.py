"""Error handling implementation for bsondump."""

import logging
from typing import Dict, Optional

from .types import (
    ValidationResult,
    ErrorResponse,
    ProcessingError,
    ErrorType
)
from .utils.validation import ValidationUtils

SUGGESTED_ACTIONS: Dict[ErrorType, str] = {
    ErrorType.TRUNCATED: "The file ends inside a document; check that it was copied completely.",
    ErrorType.INVALID_LENGTH: "A length prefix is too small; the file is corrupt or not BSON.",
    ErrorType.UNKNOWN_TYPE: "The document uses an element type this tool cannot decode.",
    ErrorType.INVALID_KEY: "A field name is not valid UTF-8 or is not terminated; the file is corrupt.",
    ErrorType.MALFORMED_TERMINATOR: "A document does not end where its length says; the file is corrupt.",
    ErrorType.NON_FINITE_NUMBER: "A double is NaN or infinite and has no JSON representation.",
    ErrorType.INVALID_VALUE: "A value payload is malformed; the file is corrupt.",
    ErrorType.NESTING_TOO_DEEP: "Documents are nested deeper than supported.",
    ErrorType.FILESYSTEM: "Check the file path and permissions.",
}


class ErrorHandler:
    """
    Error handler for bsondump operations.

    Validates input framing and turns processing errors into user-facing
    responses. Every error aborts the run, so nothing is ever recoverable.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the error handler.

        Args:
            logger: Optional logger instance for error reporting
        """
        self.logger = logger or logging.getLogger(__name__)

    def validate_input(self, data: bytes) -> ValidationResult:
        """
        Validate the framing of a BSON buffer.

        Args:
            data: Buffer of concatenated BSON documents

        Returns:
            ValidationResult with validation details
        """
        result = ValidationUtils.validate_bson_buffer(data)
        for warning in result.warnings:
            self.logger.warning(warning)
        for error in result.errors:
            self.logger.error(f"{error.message} ({error.location})")
        return result

    def handle_processing_error(self, error: ProcessingError) -> ErrorResponse:
        """
        Describe a processing error.

        Args:
            error: ProcessingError to handle

        Returns:
            ErrorResponse; ``partial_results`` is the number of documents
            written before the failure, when known
        """
        self.logger.error(f"{error.error_type.value}: {error}")
        return ErrorResponse(
            can_recover=False,
            suggested_action=SUGGESTED_ACTIONS.get(error.error_type, "Unexpected error."),
            partial_results=error.context.get("documents_written")
        )

    def create_filesystem_error(self, message: str, path: str) -> ProcessingError:
        return ProcessingError(message, ErrorType.FILESYSTEM, context={"path": path})
