from __future__ import annotations

from typing import Any, Dict, List

import attrs

from ..types import JSONValue
from .record import Record, expect_object, field


@attrs.frozen
class ImageSummary(Record):
    """An entry of the image list."""

    id: str
    parent_id: str
    repo_tags: List[str]
    repo_digests: List[str]
    created: int
    size: int
    virtual_size: int
    shared_size: int
    labels: Dict[str, str]
    containers: int

    @property
    def short_id(self) -> str:
        if self.id.startswith("sha256:"):
            return self.id[:17]
        return self.id[:10]

    @property
    def tags(self) -> List[str]:
        return [tag for tag in self.repo_tags if tag != "<none>:<none>"]

    @classmethod
    def from_json(cls, data: Any) -> ImageSummary:
        data = expect_object(data)
        return cls(
            id=field(data, "Id", str),
            parent_id=field(data, "ParentId", str, ""),
            repo_tags=field(data, "RepoTags", list, []),
            repo_digests=field(data, "RepoDigests", list, []),
            created=field(data, "Created", int, 0),
            size=field(data, "Size", int, 0),
            virtual_size=field(data, "VirtualSize", int, 0),
            shared_size=field(data, "SharedSize", int, -1),
            labels=field(data, "Labels", dict, {}),
            containers=field(data, "Containers", int, -1),
        )


@attrs.frozen
class ImageInspect(Record):
    """Low-level information about a single image."""

    id: str
    repo_tags: List[str]
    repo_digests: List[str]
    parent: str
    comment: str
    created: str
    docker_version: str
    author: str
    architecture: str
    os: str
    size: int
    config: JSONValue
    root_fs: JSONValue

    @classmethod
    def from_json(cls, data: Any) -> ImageInspect:
        data = expect_object(data)
        return cls(
            id=field(data, "Id", str),
            repo_tags=field(data, "RepoTags", list, []),
            repo_digests=field(data, "RepoDigests", list, []),
            parent=field(data, "Parent", str, ""),
            comment=field(data, "Comment", str, ""),
            created=field(data, "Created", str, ""),
            docker_version=field(data, "DockerVersion", str, ""),
            author=field(data, "Author", str, ""),
            architecture=field(data, "Architecture", str, ""),
            os=field(data, "Os", str, ""),
            size=field(data, "Size", int, 0),
            config=data.get("Config"),
            root_fs=data.get("RootFS"),
        )


@attrs.frozen
class ImageHistory(Record):
    """A parent layer of an image."""

    id: str
    created: int
    created_by: str
    tags: List[str]
    size: int
    comment: str

    @classmethod
    def from_json(cls, data: Any) -> ImageHistory:
        data = expect_object(data)
        return cls(
            id=field(data, "Id", str),
            created=field(data, "Created", int, 0),
            created_by=field(data, "CreatedBy", str, ""),
            tags=field(data, "Tags", list, []),
            size=field(data, "Size", int, 0),
            comment=field(data, "Comment", str, ""),
        )


@attrs.frozen
class ImageMatch(Record):
    """A Docker Hub search result."""

    name: str
    description: str
    star_count: int
    is_official: bool
    is_automated: bool

    @classmethod
    def from_json(cls, data: Any) -> ImageMatch:
        data = expect_object(data)
        return cls(
            name=field(data, "name", str),
            description=field(data, "description", str, ""),
            star_count=field(data, "star_count", int, 0),
            is_official=field(data, "is_official", bool, False),
            is_automated=field(data, "is_automated", bool, False),
        )


@attrs.frozen
class ImagesDeleted(Record):
    """The outcome of pruning unused images."""

    images_deleted: List[JSONValue]
    space_reclaimed: int

    @classmethod
    def from_json(cls, data: Any) -> ImagesDeleted:
        data = expect_object(data)
        return cls(
            images_deleted=field(data, "ImagesDeleted", list, []),
            space_reclaimed=field(data, "SpaceReclaimed", int, 0),
        )
