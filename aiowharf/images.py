from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Sequence

from .opts import AuthOpts, CreateImageOpts, ImageBuilderOpts
from .records import (
    ImageHistory,
    ImageInspect,
    ImageMatch,
    ImagesDeleted,
    ImageSummary,
)
from .resolve import ErrorKind, Failure, Payload, StatusTable
from .utils import clean_filters, clean_map


if TYPE_CHECKING:
    from .docker import Docker


_NOT_FOUND = Failure(ErrorKind.NOT_FOUND, "no such image")
_CONFLICT = Failure(ErrorKind.CONFLICT, "conflict")
_SERVER_ERROR = Failure(ErrorKind.SERVER_ERROR, "server error")

IMAGE_LIST = StatusTable(
    ok={200},
    failures={500: _SERVER_ERROR},
    payload=Payload.JSON,
    into=ImageSummary.from_json_list,
)
IMAGE_CREATE = StatusTable(
    ok={200},
    failures={
        404: Failure(
            ErrorKind.NOT_FOUND, "repository does not exist or no read access"
        ),
        500: _SERVER_ERROR,
    },
)
IMAGE_REMOVE = StatusTable(
    ok={200},
    failures={404: _NOT_FOUND, 409: _CONFLICT, 500: _SERVER_ERROR},
)
IMAGE_IMPORT = StatusTable(ok={200}, failures={500: _SERVER_ERROR})
IMAGE_TAG = StatusTable(
    ok={201},
    failures={
        400: Failure(ErrorKind.BAD_PARAMETER, "bad parameter"),
        404: _NOT_FOUND,
        409: _CONFLICT,
        500: _SERVER_ERROR,
    },
)
IMAGE_INSPECT = StatusTable(
    ok={200},
    failures={404: _NOT_FOUND, 500: _SERVER_ERROR},
    payload=Payload.JSON,
    into=ImageInspect.from_json,
)
IMAGE_HISTORY = StatusTable(
    ok={200},
    failures={404: _NOT_FOUND, 500: _SERVER_ERROR},
    payload=Payload.JSON,
    into=ImageHistory.from_json_list,
)
IMAGE_SEARCH = StatusTable(
    ok={200},
    failures={404: _NOT_FOUND, 500: _SERVER_ERROR},
    payload=Payload.JSON,
    into=ImageMatch.from_json_list,
)
IMAGE_PRUNE = StatusTable(
    ok={200},
    failures={404: _NOT_FOUND, 500: _SERVER_ERROR},
    payload=Payload.JSON,
    into=ImagesDeleted.from_json,
)
IMAGE_BUILD = StatusTable(
    ok={200},
    failures={404: _NOT_FOUND, 500: _SERVER_ERROR},
)


class DockerImages:
    def __init__(self, docker: Docker) -> None:
        self.docker = docker

    async def list(
        self,
        *,
        all: bool = False,
        digests: bool = False,
        filters: Optional[Mapping[str, str | Sequence[str]]] = None,
    ) -> List[ImageSummary]:
        """
        List of images

        Args:
            all: Include intermediate images.
            digests: Include the digest of each image in ``repo_digests``.
            filters: e.g. ``{"dangling": "true"}`` or ``{"reference": "alpine*"}``
        """
        params: dict[str, Any] = {"all": all, "digests": digests}
        if filters is not None:
            params["filters"] = clean_filters(filters)
        return await self.docker._request(IMAGE_LIST, "images/json", params=params)

    async def inspect(self, name: str) -> ImageInspect:
        """
        Return low-level information about an image

        Args:
            name: name of the image
        """
        return await self.docker._request(IMAGE_INSPECT, f"images/{name}/json")

    async def history(self, name: str) -> List[ImageHistory]:
        return await self.docker._request(IMAGE_HISTORY, f"images/{name}/history")

    async def create(self, opts: CreateImageOpts) -> None:
        """
        Create an image by pulling it from a registry or importing it.

        The ``X-Registry-Auth`` header is sent whenever ``opts.from_image`` is
        set, encoding ``opts.auth``. The Engine's progress output is discarded
        once the operation completes.
        """
        await self.docker._request(
            IMAGE_CREATE,
            "images/create",
            "POST",
            params=opts.to_query(),
            headers=opts.headers(),
        )

    async def pull(
        self,
        from_image: str,
        *,
        tag: Optional[str] = None,
        platform: Optional[str] = None,
        auth: Optional[AuthOpts] = None,
    ) -> None:
        """
        Pull an image from a registry.

        Args:
            from_image: Name of the image, optionally with a tag or digest.
            tag: Tag to pull if ``from_image`` has none.
            platform: Platform in the format ``os[/arch[/variant]]``.
            auth: Registry credentials.
        """
        opts = CreateImageOpts(
            from_image=from_image,
            tag=tag,
            platform=platform,
            auth=auth if auth is not None else AuthOpts(),
        )
        await self.create(opts)

    async def remove(
        self, name: str, *, force: bool = False, noprune: bool = False
    ) -> None:
        """
        Remove an image along with any untagged parent
        images that were referenced by that image

        Args:
            name: name/id of the image to delete
            force: remove the image even if it is being used
                   by stopped containers or has other tags
            noprune: don't delete untagged parent images
        """
        params = {"force": force, "noprune": noprune}
        await self.docker._request(
            IMAGE_REMOVE, f"images/{name}", "DELETE", params=params
        )

    async def import_(self, data: bytes, *, quiet: bool = False) -> None:
        """Load a tarball holding images and tags as written by ``docker save``."""
        await self.docker._request(
            IMAGE_IMPORT,
            "images/load",
            "POST",
            params={"quiet": quiet},
            data=data,
            headers={"Content-Type": "application/x-tar"},
        )

    async def tag(self, name: str, repo: str, *, tag: Optional[str] = None) -> None:
        """
        Tag the given image so that it becomes part of a repository.

        Args:
            repo: the repository to tag in
            tag: the name for the new tag
        """
        params = clean_map({"repo": repo, "tag": tag})
        await self.docker._request(
            IMAGE_TAG, f"images/{name}/tag", "POST", params=params
        )

    async def search(
        self,
        term: str,
        *,
        limit: Optional[int] = None,
        filters: Optional[Mapping[str, str | Sequence[str]]] = None,
    ) -> List[ImageMatch]:
        """Search the registry for images matching ``term``."""
        params: dict[str, Any] = dict(clean_map({"term": term, "limit": limit}))
        if filters is not None:
            params["filters"] = clean_filters(filters)
        return await self.docker._request(IMAGE_SEARCH, "images/search", params=params)

    async def prune(
        self, *, filters: Optional[Mapping[str, str | Sequence[str]]] = None
    ) -> ImagesDeleted:
        """Delete unused images."""
        params = {} if filters is None else {"filters": clean_filters(filters)}
        return await self.docker._request(
            IMAGE_PRUNE, "images/prune", "POST", params=params
        )

    async def build(self, context: bytes, opts: ImageBuilderOpts) -> None:
        """
        Build an image from a tar archive holding the build context and the
        Dockerfile. The Engine's build output is discarded once it completes.

        Args:
            context: The build context as a tar archive, optionally compressed
                with gzip, bzip2 or xz.
            opts: The build parameters.
        """
        await self.docker._request(
            IMAGE_BUILD,
            "build",
            "POST",
            params=opts.to_query(),
            data=context,
            headers={"Content-Type": "application/x-tar"},
        )
