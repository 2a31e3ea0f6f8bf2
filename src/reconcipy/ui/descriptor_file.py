"""JSON descriptor files accepted by the CLI.

Example::

    {
        "name": "rewrite-index",
        "type": "cloudfront-js-2.0",
        "comment": "append index.html",
        "content_file": "rewrite.js",
        "publish": true,
        "associations": [{"key_value_store_arn": "arn:...:key-value-store/abc"}]
    }

``content_file`` is resolved relative to the descriptor file.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from reconcipy.domain.errors import ValidationFailedError
from reconcipy.domain.model import Descriptor, expand

if TYPE_CHECKING:
    from pathlib import Path

    from reconcipy.domain.model import ResourceKind


class DescriptorFile(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str
    scope: list[str] = Field(default_factory=list[str])
    content: str | None = None
    content_file: str | None = None
    comment: str | None = None
    type_tag: str | None = Field(default=None, alias="type")
    publish: bool = True
    associations: list[dict[str, str]] | None = None

    @model_validator(mode="after")
    def _one_content_source(self) -> DescriptorFile:
        if self.content is not None and self.content_file is not None:
            raise ValueError("Set either content or content_file, not both")
        return self


def load_descriptor(path: Path, kind: ResourceKind) -> Descriptor:
    try:
        document = DescriptorFile.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as exc:
        raise ValidationFailedError(f"Invalid descriptor file {path}: {exc}") from exc

    content = document.content or ""
    if document.content_file is not None:
        content = (path.parent / document.content_file).read_text(encoding="utf-8")

    return Descriptor(
        name=document.name,
        scope=tuple(document.scope),
        content=content,
        comment=document.comment,
        type_tag=document.type_tag,
        publish=document.publish,
        associations=expand(document.associations, key_field=kind.association_key_field),
    )
