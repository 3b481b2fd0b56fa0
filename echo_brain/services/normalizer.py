"""
Content normalization and fingerprinting.

Both functions are pure: the same input always yields the same output.
"""
import hashlib
import re
from typing import Union

from echo_brain.domains.errors import InputError

_TAG_RE = re.compile(r"<[^>]*>")
_LINE_BREAK_RE = re.compile(r"[\r\n]+")
_WHITESPACE_RE = re.compile(r"\s+")


def as_text(raw_content: Union[str, bytes]) -> str:
    if isinstance(raw_content, bytes):
        try:
            return raw_content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InputError(f"Content is not valid UTF-8: {e}") from e
    if not isinstance(raw_content, str):
        raise InputError(
            f"Content must be text, got {type(raw_content).__name__}")
    return raw_content


def clean_content(raw_content: Union[str, bytes]) -> str:
    """Strip markup, flatten line breaks and collapse whitespace.

    Args:
        raw_content: Content as submitted

    Returns:
        Cleaned single-line content

    Raises:
        InputError: If the content is not text or cannot be decoded
    """
    text = as_text(raw_content)
    text = _TAG_RE.sub("", text)
    text = _LINE_BREAK_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def fingerprint(cleaned_content: str) -> str:
    """SHA-256 hex digest of the cleaned content, used for per-owner dedup."""
    try:
        data = cleaned_content.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InputError(f"Content cannot be encoded as UTF-8: {e}") from e
    return hashlib.sha256(data).hexdigest()


def estimate_size_mb(raw_content: Union[str, bytes]) -> float:
    """Size of the submitted content in MiB."""
    if isinstance(raw_content, bytes):
        return len(raw_content) / (1024 * 1024)
    if not isinstance(raw_content, str):
        raise InputError(
            f"Content must be text, got {type(raw_content).__name__}")
    return len(raw_content.encode("utf-8", errors="replace")) / (1024 * 1024)
