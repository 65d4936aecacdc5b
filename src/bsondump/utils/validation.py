"""Validation utilities for BSON frame boundaries."""

from typing import List, Tuple

from ..cursor import ByteCursor
from ..decoder import MIN_DOCUMENT_SIZE
from ..types import ErrorType, ProcessingError, ValidationError, ValidationResult


class ValidationUtils:
    """Utility class for checking framing without decoding elements."""

    @staticmethod
    def scan_frames(data: bytes) -> List[Tuple[int, int]]:
        """
        Locate every document frame by following length prefixes.

        Args:
            data: Buffer of concatenated BSON documents

        Returns:
            List of (offset, size) tuples in buffer order

        Raises:
            ProcessingError: TRUNCATED or INVALID_LENGTH for the first bad frame
        """
        frames = []
        cursor = ByteCursor(data)
        while not cursor.at_end:
            offset = cursor.offset
            size = cursor.peek_int32()
            if size < MIN_DOCUMENT_SIZE:
                raise ProcessingError(
                    f"Invalid document length {size} at offset {offset}",
                    ErrorType.INVALID_LENGTH,
                    context={"offset": offset, "length": size}
                )
            cursor.sub_cursor(size)
            frames.append((offset, size))
        return frames

    @staticmethod
    def validate_bson_buffer(data: bytes) -> ValidationResult:
        """
        Validate the framing of a buffer of BSON documents.

        Args:
            data: Buffer to validate

        Returns:
            ValidationResult with validation details
        """
        errors = []
        warnings = []

        if not data:
            warnings.append("Input is empty; no documents to dump")
            return ValidationResult(is_valid=True, errors=errors, warnings=warnings)

        try:
            frames = ValidationUtils.scan_frames(data)
        except ProcessingError as e:
            errors.append(ValidationError(
                type=e.error_type,
                message=str(e),
                location=f"offset {e.context.get('offset', 0)}"
            ))
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        for offset, size in frames:
            if data[offset + size - 1] != 0:
                warnings.append(f"Document at offset {offset} does not end with a NUL byte")

        return ValidationResult(
            is_valid=True,
            errors=errors,
            warnings=warnings,
            document_count=len(frames)
        )
