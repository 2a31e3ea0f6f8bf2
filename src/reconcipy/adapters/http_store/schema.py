"""Wire payloads exchanged with the HTTP remote store."""

from __future__ import annotations

import logging
from typing import ClassVar, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)

RawAssociations: TypeAlias = list[dict[str, str]]


class RemoteStoreBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "Remote store %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class DescriptorPayload(RemoteStoreBaseModel):
    """Request body for create and update."""

    name: str
    scope: list[str] = Field(default_factory=list[str])
    content: str
    comment: str | None = None
    type_tag: str | None = Field(default=None, alias="type")
    associations: RawAssociations | None = None


class CreateResponse(RemoteStoreBaseModel):
    key: str
    status: str
    resource_id: str | None = Field(default=None, alias="resourceId")


class StageResponse(RemoteStoreBaseModel):
    key: str
    stage: str
    status: str
    resource_id: str | None = Field(default=None, alias="resourceId")
    comment: str | None = None
    type_tag: str | None = Field(default=None, alias="type")
    associations: RawAssociations | None = None
    # only present for kinds that keep content inline with the metadata
    content: str | None = None


class ErrorResponse(RemoteStoreBaseModel):
    code: str | None = None
    message: str = ""
