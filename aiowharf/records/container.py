from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

import attrs

from ..types import JSONValue
from ..utils import decode_json_header
from .record import Record, expect_object, field


@attrs.frozen
class ContainerSummary(Record):
    """An entry of the container list."""

    id: str
    names: List[str]
    image: str
    image_id: str
    command: str
    created: int
    state: str
    status: str
    ports: List[JSONValue]
    labels: Dict[str, str]
    host_config: JSONValue
    network_settings: JSONValue
    mounts: List[JSONValue]

    @property
    def short_id(self) -> str:
        return self.id[:10]

    @classmethod
    def from_json(cls, data: Any) -> ContainerSummary:
        data = expect_object(data)
        return cls(
            id=field(data, "Id", str),
            names=field(data, "Names", list, []),
            image=field(data, "Image", str, ""),
            image_id=field(data, "ImageID", str, ""),
            command=field(data, "Command", str, ""),
            created=field(data, "Created", int, 0),
            state=field(data, "State", str, ""),
            status=field(data, "Status", str, ""),
            ports=field(data, "Ports", list, []),
            labels=field(data, "Labels", dict, {}),
            host_config=data.get("HostConfig"),
            network_settings=data.get("NetworkSettings"),
            mounts=field(data, "Mounts", list, []),
        )


@attrs.frozen
class ContainerInspect(Record):
    """Low-level information about a single container."""

    id: str
    name: str
    created: str
    image: str
    path: str
    args: List[str]
    state: JSONValue
    config: JSONValue
    host_config: JSONValue
    network_settings: JSONValue
    mounts: List[JSONValue]
    driver: str
    restart_count: int
    app_armor_profile: str
    exec_ids: List[str]
    hostname_path: str
    hosts_path: str
    log_path: str
    mount_label: str
    process_label: str
    resolv_conf_path: str

    @property
    def short_id(self) -> str:
        return self.id[:10]

    @classmethod
    def from_json(cls, data: Any) -> ContainerInspect:
        data = expect_object(data)
        return cls(
            id=field(data, "Id", str),
            name=field(data, "Name", str),
            created=field(data, "Created", str, ""),
            image=field(data, "Image", str, ""),
            path=field(data, "Path", str, ""),
            args=field(data, "Args", list, []),
            state=data.get("State"),
            config=data.get("Config"),
            host_config=data.get("HostConfig"),
            network_settings=data.get("NetworkSettings"),
            mounts=field(data, "Mounts", list, []),
            driver=field(data, "Driver", str, ""),
            restart_count=field(data, "RestartCount", int, 0),
            app_armor_profile=field(data, "AppArmorProfile", str, ""),
            exec_ids=field(data, "ExecIDs", list, []),
            hostname_path=field(data, "HostnamePath", str, ""),
            hosts_path=field(data, "HostsPath", str, ""),
            log_path=field(data, "LogPath", str, ""),
            mount_label=field(data, "MountLabel", str, ""),
            process_label=field(data, "ProcessLabel", str, ""),
            resolv_conf_path=field(data, "ResolvConfPath", str, ""),
        )


@attrs.frozen
class FileInfo(Record):
    """Filesystem header information about a path inside a container."""

    name: str
    size: int
    mode: int
    mtime: str
    link_target: str

    @classmethod
    def from_json(cls, data: Any) -> FileInfo:
        data = expect_object(data)
        return cls(
            name=field(data, "name", str),
            size=field(data, "size", int),
            mode=field(data, "mode", int),
            mtime=field(data, "mtime", str),
            link_target=field(data, "linkTarget", str, ""),
        )

    @classmethod
    def from_header(cls, value: str) -> FileInfo:
        """Decode the base64-encoded JSON of ``X-Docker-Container-Path-Stat``."""
        return cls.from_json(decode_json_header(value))


@attrs.frozen
class Process(Record):
    """
    One row of the container process table, labeled by the column titles.

    Titles and row values are paired positionally; a row shorter or longer
    than the titles yields only as many fields as the shorter of the two.
    """

    info: Mapping[str, str]

    def __getitem__(self, title: str) -> str:
        return self.info[title]

    @classmethod
    def from_row(cls, titles: Sequence[str], row: Sequence[str]) -> Process:
        return cls(info=dict(zip(titles, row)))

    @classmethod
    def from_top(cls, data: Any) -> List[Process]:
        """Reshape ``{"Titles": [...], "Processes": [[...], ...]}`` into records."""
        data = expect_object(data)
        titles = field(data, "Titles", list)
        processes = field(data, "Processes", list, [])
        return [cls.from_row(titles, row) for row in processes]
