#!/usr/bin/env python3

import asyncio

from aiowharf import ErrorKind, ProtocolFailure
from aiowharf.docker import Docker
from aiowharf.opts import (
    AttachOpts,
    ContainerBuilderOpts,
    ContainerLogsOpts,
    RmContainerOpts,
)


async def demo(docker):
    try:
        await docker.images.inspect("alpine:latest")
    except ProtocolFailure as e:
        if e.kind is ErrorKind.NOT_FOUND:
            await docker.images.pull("alpine:latest")
        else:
            print("Error retrieving alpine:latest image.")
            return

    opts = ContainerBuilderOpts(
        image="alpine:latest",
        cmd=["/bin/ash"],
        attach_stdin=True,
        attach_stdout=True,
        attach_stderr=True,
        tty=True,
        open_stdin=True,
        stdin_once=True,
    )
    container = await docker.containers.create("aiowharf-example", opts)
    print(f"created container {container.id}")

    try:
        stream = await container.attach(
            AttachOpts(stdin=True, stdout=True, stderr=True, stream=True)
        )
        async with stream:
            await container.start()
            await stream.write(b'echo "hello world"\nexit\n')
            print("sent a shell command")
            while (chunk := await stream.read()) is not None:
                print(f"received: {chunk!r}")

        output = await container.logs(ContainerLogsOpts(stdout=True))
        print(f"log output: {output}")
    finally:
        print("removing container")
        await container.remove(RmContainerOpts(force=True))


async def main():
    async with Docker() as docker:
        await demo(docker)


if __name__ == "__main__":
    asyncio.run(main())
