#!/usr/bin/env python3

import asyncio

from aiowharf.docker import Docker
from aiowharf.opts import ListContainersOpts


async def demo(docker):
    print("--------------------------------")
    print("- Check Docker Image List")
    images = await docker.images.list()
    for image in images:
        print(image.short_id, ":", ", ".join(image.tags) or "<untagged>")

    print("--------------------------------")
    print("- Check Docker Network List")
    for network in await docker.networks.list():
        print(network.name, ":", network.driver, network.scope)

    print("--------------------------------")
    print("- Check Docker Container List")
    containers = await docker.containers.list(ListContainersOpts(all=True))
    for container in containers:
        info = await container.inspect()
        print("Id", ":", info.short_id, info.name, container.data.status)
    print("--------------------------------")


async def main():
    async with Docker() as docker:
        await demo(docker)


if __name__ == "__main__":
    asyncio.run(main())
