"""
Option value objects for the operations that take more than a couple of
arguments.

Options are immutable: construct them with keyword arguments and derive
modified copies with :func:`attrs.evolve`::

    opts = ListContainersOpts(all=True, limit=10)
    everything = attrs.evolve(opts, limit=None)

Unset (``None``) options are omitted from the request entirely, leaving the
Engine's default in place.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

import attrs

from .utils import clean_filters, compose_auth_header, httpize


def _tuple_or_none(value: Optional[Sequence[Any]]) -> Optional[Tuple[Any, ...]]:
    if value is None:
        return None
    if isinstance(value, str):
        raise TypeError("expected a sequence of strings, not a string")
    return tuple(value)


def _dict_or_none(value: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    return dict(value)


def _port_set(ports: Sequence[str]) -> Dict[str, Any]:
    return {port: {} for port in ports}


def option(
    key: str,
    *,
    section: Optional[str] = None,
    encode: Optional[Callable[[Any], Any]] = None,
    converter: Optional[Callable[[Any], Any]] = None,
    default: Any = None,
) -> Any:
    """
    Declare an option field mapped to the Engine key ``key``.

    Args:
        key: The name of the query parameter or body field.
        section: Nest the value under this body field (e.g. ``HostConfig``).
        encode: Transform applied to the value when the request is built.
        converter: Transform applied once at construction.
        default: Value used when the caller leaves the option out.
    """
    metadata: Dict[str, Any] = {"key": key, "section": section, "encode": encode}
    if converter is None:
        return attrs.field(default=default, metadata=metadata)
    return attrs.field(default=default, metadata=metadata, converter=converter)


class Opts:
    __slots__ = ()

    def _collect(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for attribute in attrs.fields(type(self)):  # type: ignore[misc]
            key = attribute.metadata.get("key")
            value = getattr(self, attribute.name)
            if key is None or value is None:
                continue
            encode = attribute.metadata.get("encode")
            if encode is not None:
                value = encode(value)
            section = attribute.metadata.get("section")
            target = values.setdefault(section, {}) if section else values
            target[key] = value
        return values

    def to_query(self) -> Mapping[str, str]:
        """Render the set options as query parameters."""
        query = httpize(self._collect())
        assert query is not None
        return query

    def to_json(self) -> Dict[str, Any]:
        """Render the set options as a JSON request body."""
        return self._collect()


@attrs.frozen(kw_only=True)
class ListContainersOpts(Opts):
    #: Return all containers, not only the running ones.
    all: Optional[bool] = option("all")
    #: Return this number of most recently created containers.
    limit: Optional[int] = option("limit")
    #: Return the container sizes as ``SizeRw`` and ``SizeRootFs``.
    size: Optional[bool] = option("size")
    #: e.g. ``{"status": ["paused"]}``; scalar values are wrapped into lists.
    filters: Optional[Mapping[str, Any]] = option("filters", encode=clean_filters)


@attrs.frozen(kw_only=True)
class RmContainerOpts(Opts):
    #: Remove the anonymous volumes associated with the container.
    volumes: Optional[bool] = option("v")
    #: Kill the container first if it is running.
    force: Optional[bool] = option("force")
    #: Remove the specified link associated with the container.
    link: Optional[bool] = option("link")


@attrs.frozen(kw_only=True)
class ContainerLogsOpts(Opts):
    stdout: Optional[bool] = option("stdout")
    stderr: Optional[bool] = option("stderr")
    #: Only return logs since this UNIX timestamp.
    since: Optional[int] = option("since")
    #: Only return logs before this UNIX timestamp.
    until: Optional[int] = option("until")
    timestamps: Optional[bool] = option("timestamps")
    #: Number of lines from the end of the logs, or ``"all"``.
    tail: Optional[Union[int, str]] = option("tail", encode=str)


@attrs.frozen(kw_only=True)
class UploadArchiveOpts(Opts):
    #: Directory in the container to extract the archive's contents into.
    path: Optional[str] = option("path")
    #: Fail if a directory would replace a non-directory or vice versa.
    no_overwrite_dir_non_dir: Optional[bool] = option("noOverwriteDirNonDir")
    #: Copy UID/GID maps to the destination file or directory.
    copy_uid_gid: Optional[bool] = option("copyUIDGID")


@attrs.frozen(kw_only=True)
class AttachOpts(Opts):
    detach_keys: Optional[str] = option("detachKeys")
    #: Replay the previous output before streaming.
    logs: Optional[bool] = option("logs")
    stream: Optional[bool] = option("stream")
    stdin: Optional[bool] = option("stdin")
    stdout: Optional[bool] = option("stdout")
    stderr: Optional[bool] = option("stderr")


@attrs.frozen(kw_only=True)
class ContainerBuilderOpts(Opts):
    """Configuration of a container to create."""

    image: Optional[str] = option("Image")
    hostname: Optional[str] = option("Hostname")
    domain_name: Optional[str] = option("Domainname")
    user: Optional[str] = option("User")
    attach_stdin: Optional[bool] = option("AttachStdin")
    attach_stdout: Optional[bool] = option("AttachStdout")
    attach_stderr: Optional[bool] = option("AttachStderr")
    tty: Optional[bool] = option("Tty")
    open_stdin: Optional[bool] = option("OpenStdin")
    stdin_once: Optional[bool] = option("StdinOnce")
    #: ``["VAR=value", ...]``
    env: Optional[Tuple[str, ...]] = option("Env", converter=_tuple_or_none)
    cmd: Optional[Tuple[str, ...]] = option("Cmd", converter=_tuple_or_none)
    args_escaped: Optional[bool] = option("ArgsEscaped")
    working_dir: Optional[str] = option("WorkingDir")
    #: ``[""]`` resets the entrypoint to the system default.
    entrypoint: Optional[Tuple[str, ...]] = option(
        "Entrypoint", converter=_tuple_or_none
    )
    network_disabled: Optional[bool] = option("NetworkDisabled")
    mac_address: Optional[str] = option("MacAddress")
    on_build: Optional[Tuple[str, ...]] = option("OnBuild", converter=_tuple_or_none)
    stop_signal: Optional[str] = option("StopSignal")
    stop_timeout: Optional[int] = option("StopTimeout")
    shell: Optional[Tuple[str, ...]] = option("Shell", converter=_tuple_or_none)
    labels: Optional[Dict[str, str]] = option("Labels", converter=_dict_or_none)
    #: ``["22/tcp", "53/udp", ...]``
    exposed_ports: Optional[Tuple[str, ...]] = option(
        "ExposedPorts", encode=_port_set, converter=_tuple_or_none
    )
    #: ``["/host/path:/container/path[:ro]", ...]``
    volumes: Optional[Tuple[str, ...]] = option(
        "Binds", section="HostConfig", converter=_tuple_or_none
    )
    #: Memory limit in bytes.
    memory: Optional[int] = option("Memory", section="HostConfig")
    #: ``bridge``, ``host``, ``none``, ``container:<name|id>`` or a network name.
    network_mode: Optional[str] = option("NetworkMode", section="HostConfig")


@attrs.frozen(kw_only=True)
class AuthOpts(Opts):
    """
    Registry credentials.

    The same field set is posted as JSON to authenticate and sent base64
    encoded in the ``X-Registry-Auth`` header of image pulls.
    """

    username: Optional[str] = option("username")
    password: Optional[str] = attrs.field(
        default=None, repr=False, metadata={"key": "password"}
    )
    email: Optional[str] = option("email")
    #: Registry address without a protocol, e.g. ``registry.example.com``.
    server_address: Optional[str] = option("serveraddress")

    def serialize(self) -> str:
        """Encode the credentials as an ``X-Registry-Auth`` header value."""
        return compose_auth_header(self.to_json())


@attrs.frozen(kw_only=True)
class CreateImageOpts(Opts):
    #: Image to pull; may include a tag or digest.
    from_image: Optional[str] = option("fromImage")
    #: Source to import, a URL or ``-`` for the request body.
    from_src: Optional[str] = option("fromSrc")
    repo: Optional[str] = option("repo")
    #: Tag or digest. Leaving it empty on a pull fetches every tag.
    tag: Optional[str] = option("tag")
    #: ``os[/arch[/variant]]``
    platform: Optional[str] = option("platform")
    auth: AuthOpts = attrs.field(factory=AuthOpts)

    def headers(self) -> Dict[str, str]:
        if self.from_image is None:
            return {}
        return {"X-Registry-Auth": self.auth.serialize()}


@attrs.frozen(kw_only=True)
class ExecOpts(Opts):
    """
    Configuration of a command to run inside a running container.

    ``detach`` and ``tty`` default to ``False`` so that starting the exec
    instance returns the command's output.
    """

    cmd: Optional[Tuple[str, ...]] = option("Cmd", converter=_tuple_or_none)
    attach_stdin: Optional[bool] = option("AttachStdin")
    attach_stdout: Optional[bool] = option("AttachStdout")
    attach_stderr: Optional[bool] = option("AttachStderr")
    detach_keys: Optional[str] = option("DetachKeys")
    tty: bool = option("Tty", default=False)
    env: Optional[Tuple[str, ...]] = option("Env", converter=_tuple_or_none)
    privileged: Optional[bool] = option("Privileged")
    #: ``user``, ``user:group``, ``uid`` or ``uid:gid``.
    user: Optional[str] = option("User")
    working_dir: Optional[str] = option("WorkingDir")
    #: Not part of the exec configuration; sent when the instance is started.
    detach: bool = False


@attrs.frozen(kw_only=True)
class ImageBuilderOpts(Opts):
    #: Path of the Dockerfile within the build context.
    dockerfile: Optional[str] = option("dockerfile")
    #: ``name:tag`` to apply to the image.
    name: Optional[str] = option("t")
    #: Git repository or HTTP(S) context URI.
    remote: Optional[str] = option("remote")
    extra_hosts: Optional[str] = option("extrahosts")
    quiet: Optional[bool] = option("q")
    no_cache: Optional[bool] = option("nocache")
    rm: Optional[bool] = option("rm")
    forcerm: Optional[bool] = option("forcerm")
    memory: Optional[int] = option("memory")
    #: Memory plus swap; ``-1`` disables swap.
    mem_swap: Optional[int] = option("memswap")
    cpu_shares: Optional[int] = option("cpushares")
    cpuset_cpus: Optional[str] = option("cpusetcpus")
    cpu_period: Optional[int] = option("cpuperiod")
    cpu_quota: Optional[int] = option("cpuquota")
    build_args: Optional[Dict[str, str]] = option(
        "buildargs", converter=_dict_or_none
    )
    shm_size: Optional[int] = option("shmsize")
    labels: Optional[Dict[str, str]] = option("labels", converter=_dict_or_none)
    network_mode: Optional[str] = option("networkmode")
    platform: Optional[str] = option("platform")
    target: Optional[str] = option("target")
