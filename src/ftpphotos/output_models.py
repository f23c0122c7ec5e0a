from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ftpphotos.models import Photo


def _epoch_millis(value: datetime | None) -> int | None:
    if value is None:
        return None
    return int(value.timestamp() * 1000)


class PhotoOutput(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    path: str
    creation_time: int | None = Field(default=None, alias="creationTime")
    size: int

    @classmethod
    def from_photo(cls, photo: Photo) -> PhotoOutput:
        return cls(
            name=photo.name,
            path=photo.path,
            creation_time=_epoch_millis(photo.creation_time),
            size=photo.size,
        )

    def as_json(self) -> dict:
        return self.model_dump(by_alias=True)


def photos_to_json(photos: list[Photo]) -> list[dict]:
    return [PhotoOutput.from_photo(p).as_json() for p in photos]
