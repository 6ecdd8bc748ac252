"""Policy checks applied to upload candidates before any I/O."""

from typing import Optional

from .exceptions import EmptyInputError, FileTooLargeError, UnsupportedExtensionError
from .image_utils import extract_extension
from .models import UploadCandidate, ValidationPolicy


def validate_candidate(
    candidate: Optional[UploadCandidate], policy: ValidationPolicy
) -> None:
    """
    Check a candidate against the policy.

    Checks run in order: empty input, size limit, extension. The first
    failing check raises; nothing is read from the candidate's stream.

    Args:
        candidate: File submitted by the caller
        policy: Validation rules in force

    Raises:
        EmptyInputError: Candidate is missing, unnamed or zero bytes long
        FileTooLargeError: Candidate exceeds a limited policy's size
        UnsupportedExtensionError: Extension is not in a non-empty allow list
    """
    if candidate is None or not candidate.name or candidate.size_bytes <= 0:
        raise EmptyInputError()

    if policy.is_size_limited and candidate.size_bytes > policy.max_size_bytes:
        raise FileTooLargeError(policy.max_size_bytes)

    extension = extract_extension(candidate.name)
    if not policy.allows_extension(extension):
        raise UnsupportedExtensionError(extension)
