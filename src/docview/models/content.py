"""Renderable content blocks produced from chapter markup."""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict


class TextBlock(BaseModel):
    """A run of formatted text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class ImageBlock(BaseModel):
    """A resolved image. Cover images fill the whole page."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    data: bytes
    is_cover: bool = False


ContentBlock = Union[TextBlock, ImageBlock]
