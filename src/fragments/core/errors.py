"""Error taxonomy shared by the fragment core and the HTTP boundary.

Each error carries the HTTP status the API answers with. Anything that is not
a ``FragmentError`` (storage failures included) is treated as a server error.
"""

from __future__ import annotations


class FragmentError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(FragmentError):
    """Malformed fragment input: missing owner or type, bad size, non-bytes data."""

    status_code = 400


class TypeMismatchError(ValidationError):
    """Replacement data declared a different type than the stored fragment."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"Content-Type {actual} does not match fragment type {expected}")
        self.expected = expected
        self.actual = actual


class UnsupportedTypeError(FragmentError):
    status_code = 415

    def __init__(self, content_type: str) -> None:
        super().__init__(f"Unsupported fragment type: {content_type}")
        self.content_type = content_type


class NotFoundError(FragmentError):
    status_code = 404

    def __init__(self, owner_id: str, fragment_id: str) -> None:
        super().__init__(f"Fragment {fragment_id} not found")
        self.owner_id = owner_id
        self.fragment_id = fragment_id


class ConversionError(FragmentError):
    """A conversion rule matched but the transform itself failed."""

    status_code = 422


class UnsupportedConversionError(FragmentError):
    status_code = 415

    def __init__(self, mime_type: str, extension: str) -> None:
        super().__init__(f"Unsupported conversion: {mime_type} to {extension}")
        self.mime_type = mime_type
        self.extension = extension
