import base64
from dataclasses import dataclass


@dataclass(frozen=True)
class ImageAsset:
    """
    Canonical encoded bitmap: a MIME type plus a base64 payload.

    Produced by the normalizer (person, outfit and style uploads) or by the
    image model (generated views). Immutable once created.
    """
    mime_type: str
    data: str  # base64, no data: prefix

    @classmethod
    def from_bytes(cls, image_bytes: bytes, mime_type: str) -> "ImageAsset":
        return cls(mime_type=mime_type, data=base64.b64encode(image_bytes).decode("utf-8"))

    @classmethod
    def from_data_url(cls, data_url: str) -> "ImageAsset":
        """Parse a ``data:<mime>;base64,<payload>`` string."""
        header, _, payload = data_url.partition(",")
        if not header.startswith("data:") or ";base64" not in header or not payload:
            raise ValueError("Not a base64 data URL")
        mime_type = header[len("data:"):header.index(";")]
        return cls(mime_type=mime_type, data=payload)

    @property
    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.data)

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    def __repr__(self) -> str:
        return f"<ImageAsset(mime_type={self.mime_type}, size={len(self.data)})>"
