"""Asset payload decoders."""

from .texture import AssetForm, AssetPayload, decode_asset

__all__ = ["AssetForm", "AssetPayload", "decode_asset"]
