"""Format conversion for fragment payloads.

Rules are looked up by ``(FragmentKind, extension)``. Image fragments accept any
extension at lookup time and fail inside the codec step when the target format
is unknown, so a bad image extension surfaces as a ``ConversionError`` rather
than an unsupported conversion.
"""

from __future__ import annotations

import asyncio
import io
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import markdown
from PIL import Image, UnidentifiedImageError

from fragments.core.errors import ConversionError, UnsupportedConversionError
from fragments.models import Fragment, FragmentKind

logger = logging.getLogger(__name__)

IMAGE_FORMATS: dict[str, str] = {
    "png": "png",
    "jpeg": "jpeg",
    "jpg": "jpeg",
    "webp": "webp",
    "gif": "gif",
}

# Pillow cannot write alpha or palette data as JPEG
_JPEG_MODES = frozenset({"RGB", "L", "CMYK"})


@dataclass(frozen=True)
class Conversion:
    data: bytes
    content_type: str


Rule = Callable[["FragmentConverter", bytes, str], Awaitable[Conversion]]


@dataclass(frozen=True)
class FragmentConverter:
    """Stateless converter. A new markdown renderer is built for every call."""

    markdown_extensions: tuple[str, ...] = ("fenced_code", "tables")

    async def convert(self, fragment: Fragment, data: bytes, extension: str | None = None) -> Conversion:
        if not extension:
            return Conversion(data, fragment.mime_type)

        ext = extension.lower()
        kind = fragment.kind
        rule = _RULES.get((kind, ext))
        if rule is None and kind is FragmentKind.IMAGE:
            rule = _convert_image
        if rule is None:
            logger.warning("Unsupported conversion requested: %s -> %s", fragment.mime_type, ext)
            raise UnsupportedConversionError(fragment.mime_type, ext)
        return await rule(self, data, ext)

    def render_markdown(self, text: str) -> str:
        return markdown.markdown(text, extensions=list(self.markdown_extensions))


async def _markdown_to_html(converter: FragmentConverter, data: bytes, ext: str) -> Conversion:
    try:
        html = converter.render_markdown(data.decode("utf-8"))
    except Exception as exc:
        raise ConversionError(f"Failed to convert Markdown to HTML: {exc}") from exc
    return Conversion(html.encode("utf-8"), "text/html")


async def _json_to_text(converter: FragmentConverter, data: bytes, ext: str) -> Conversion:
    text = data.decode("utf-8", errors="replace")
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return Conversion(text.encode("utf-8"), "text/plain")
    if isinstance(parsed, str):
        return Conversion(parsed.encode("utf-8"), "text/plain")
    try:
        pretty = json.dumps(parsed, indent=2, ensure_ascii=False)
    except (TypeError, ValueError, RecursionError):
        pretty = text
    return Conversion(pretty.encode("utf-8"), "text/plain")


def _passthrough(content_type: str) -> Rule:
    async def rule(converter: FragmentConverter, data: bytes, ext: str) -> Conversion:
        return Conversion(data, content_type)

    return rule


def _reencode(data: bytes, target: str) -> bytes:
    with Image.open(io.BytesIO(data)) as image:
        if target == "jpeg" and image.mode not in _JPEG_MODES:
            image = image.convert("RGB")
        out = io.BytesIO()
        image.save(out, format=target.upper())
    return out.getvalue()


async def _convert_image(converter: FragmentConverter, data: bytes, ext: str) -> Conversion:
    target = IMAGE_FORMATS.get(ext)
    if target is None:
        raise ConversionError(f"Failed to convert image: unsupported image format {ext}")
    try:
        converted = await asyncio.to_thread(_reencode, data, target)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise ConversionError(f"Failed to convert image: {exc}") from exc
    return Conversion(converted, f"image/{target}")


_RULES: dict[tuple[FragmentKind, str], Rule] = {
    (FragmentKind.MARKDOWN, "html"): _markdown_to_html,
    (FragmentKind.MARKDOWN, "md"): _passthrough("text/markdown"),
    (FragmentKind.MARKDOWN, "markdown"): _passthrough("text/markdown"),
    (FragmentKind.JSON, "txt"): _json_to_text,
    (FragmentKind.JSON, "json"): _passthrough("application/json"),
    (FragmentKind.TEXT, "txt"): _passthrough("text/plain"),
    **{(FragmentKind.IMAGE, ext): _convert_image for ext in IMAGE_FORMATS},
}
