"""Docker image references."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Union


@dataclass(frozen=True)
class Image:
    url: str
    tag: Optional[str] = None
    digest: Optional[str] = None

    def with_tag(self, tag: str) -> "Image":
        return replace(self, tag=tag, digest=None)

    def with_digest(self, digest: str) -> "Image":
        return replace(self, tag=None, digest=digest)

    def show(self) -> str:
        """Reference string: ``url@digest``, ``url:tag`` or bare ``url``."""
        if self.digest:
            return f"{self.url}@{self.digest}"
        if self.tag:
            return f"{self.url}:{self.tag}"
        return self.url

    def __str__(self) -> str:
        return self.show()


def image(i: Union[Image, str], tag: Optional[str] = None) -> Image:
    img = Image(url=i) if isinstance(i, str) else i
    if tag is not None:
        img = img.with_tag(tag)
    return img
