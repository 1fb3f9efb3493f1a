"""Thumbnail raster model."""

import io

from PIL import Image
from pydantic import BaseModel, ConfigDict


class Thumbnail(BaseModel):
    """A small PNG-encoded preview of one page or chapter."""

    model_config = ConfigDict(frozen=True)

    width: int
    height: int
    data: bytes

    @classmethod
    def from_image(cls, image: Image.Image) -> "Thumbnail":
        """Encode a Pillow image as PNG."""
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return cls(width=image.width, height=image.height, data=buffer.getvalue())

    def to_image(self) -> Image.Image:
        return Image.open(io.BytesIO(self.data))
