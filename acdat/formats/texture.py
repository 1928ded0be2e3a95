"""Texture/icon asset payload decoder.

Layout at a file record's offset (all little-endian u32):
- 2 reserved fields
- Form discriminant (6 or 10)
- Width, height, format, length
- ``length`` raw bytes of pixel data

Form 10 payloads carry RGB(A) pixels and form 6 payloads 24-bit pixels in
the game client; both share the layout above and are passed through as-is.
"""

from dataclasses import dataclass, field
from enum import IntEnum

from ..errors import UnsupportedFormError
from ..utils.binary import ByteSource

# Icons are the 32x32 subset of textures
ICON_SIZE = 32


class AssetForm(IntEnum):
    """Known payload layouts."""

    BITMAP_24 = 6
    BITMAP_RGB = 10


SUPPORTED_FORMS = frozenset(form.value for form in AssetForm)


@dataclass(frozen=True)
class AssetPayload:
    """Decoded texture payload."""

    form: int
    width: int
    height: int
    format: int
    length: int
    data: bytes = field(repr=False)

    @property
    def is_icon(self) -> bool:
        return self.width == ICON_SIZE and self.height == ICON_SIZE


def decode_asset(source: ByteSource, offset: int) -> AssetPayload:
    """Decode the asset payload stored at ``offset``."""
    reader = source.cursor(offset)

    # Two leading fields with no known meaning
    reader.read_u32()
    reader.read_u32()
    form = reader.read_u32()

    if form not in SUPPORTED_FORMS:
        raise UnsupportedFormError(form)

    width = reader.read_u32()
    height = reader.read_u32()
    pixel_format = reader.read_u32()
    length = reader.read_u32()
    data = reader.read_bytes(length)

    return AssetPayload(
        form=form,
        width=width,
        height=height,
        format=pixel_format,
        length=length,
        data=data,
    )
