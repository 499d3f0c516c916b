from __future__ import annotations

import base64
import json

import pytest

from aiowharf.records import (
    ContainerInspect,
    ContainerSummary,
    FileInfo,
    ImageSummary,
    NetworkSummary,
    Process,
)


def test_container_summary() -> None:
    summary = ContainerSummary.from_json(
        {
            "Id": "8dfafdbc3a40b1b8b7d4c7bc2b8e3f0c",
            "Names": ["/boring_feynman"],
            "Image": "ubuntu:latest",
            "ImageID": "sha256:d74508fb6632",
            "Command": "echo 1",
            "Created": 1367854155,
            "State": "exited",
            "Status": "Exit 0",
            "Ports": [{"PrivatePort": 2222, "PublicPort": 3333, "Type": "tcp"}],
            "Labels": {"com.example.vendor": "Acme"},
            "HostConfig": {"NetworkMode": "default"},
            "NetworkSettings": {"Networks": {}},
            "Mounts": [],
            "SizeRw": 12288,
        }
    )
    assert summary.short_id == "8dfafdbc3a"
    assert summary.names == ["/boring_feynman"]
    assert summary.host_config == {"NetworkMode": "default"}
    assert summary.ports[0] == {"PrivatePort": 2222, "PublicPort": 3333, "Type": "tcp"}


def test_container_summary_defaults() -> None:
    summary = ContainerSummary.from_json({"Id": "abc", "Labels": None})
    assert summary.labels == {}
    assert summary.network_settings is None


@pytest.mark.parametrize(
    "data, exc",
    [
        ({}, KeyError),
        ({"Id": 5}, TypeError),
        ({"Id": "abc", "Names": "web"}, TypeError),
        (["Id"], TypeError),
    ],
)
def test_container_summary_shape_errors(data: object, exc: type) -> None:
    with pytest.raises(exc):
        ContainerSummary.from_json(data)


def test_from_json_list() -> None:
    assert ContainerSummary.from_json_list([]) == []
    with pytest.raises(TypeError):
        ContainerSummary.from_json_list({"Id": "abc"})


def test_container_inspect_requires_name() -> None:
    inspect = ContainerInspect.from_json(
        {"Id": "abc", "Name": "/web", "State": {"Running": True}}
    )
    assert inspect.state == {"Running": True}
    with pytest.raises(KeyError):
        ContainerInspect.from_json({"Id": "abc"})


def test_process_zips_titles() -> None:
    processes = Process.from_top(
        {"Titles": ["PID", "CMD"], "Processes": [["1", "bash"], ["2", "sh"]]}
    )
    assert [p.info for p in processes] == [
        {"PID": "1", "CMD": "bash"},
        {"PID": "2", "CMD": "sh"},
    ]
    assert processes[1]["CMD"] == "sh"


def test_process_rows_truncate_to_shorter() -> None:
    processes = Process.from_top(
        {
            "Titles": ["PID", "CMD", "USER"],
            "Processes": [["1"], ["2", "sh", "root", "x"]],
        }
    )
    assert processes[0].info == {"PID": "1"}
    assert processes[1].info == {"PID": "2", "CMD": "sh", "USER": "root"}


def test_process_without_rows() -> None:
    assert Process.from_top({"Titles": ["PID"]}) == []
    with pytest.raises(KeyError):
        Process.from_top({"Processes": []})


def test_process_only_built_from_top() -> None:
    with pytest.raises(NotImplementedError):
        Process.from_json({"PID": "1"})


def test_file_info_from_header() -> None:
    stat = {"name": "x", "size": 1, "mode": 0, "mtime": "t", "linkTarget": ""}
    value = base64.b64encode(json.dumps(stat).encode()).decode("ascii")
    assert FileInfo.from_header(value) == FileInfo(
        name="x", size=1, mode=0, mtime="t", link_target=""
    )


def test_image_summary_tags() -> None:
    image = ImageSummary.from_json(
        {
            "Id": "sha256:ec3f0931a6e6b6855d76b2d7b0be30e8",
            "RepoTags": ["alpine:3.19", "<none>:<none>"],
        }
    )
    assert image.tags == ["alpine:3.19"]
    assert image.short_id == "sha256:ec3f0931a"
    assert image.shared_size == -1
    assert image.containers == -1


def test_network_summary() -> None:
    network = NetworkSummary.from_json(
        {
            "Name": "bridge",
            "Id": "f2de39df4171",
            "Scope": "local",
            "Driver": "bridge",
            "EnableIPv6": False,
            "IPAM": {"Driver": "default", "Config": [{"Subnet": "172.17.0.0/16"}]},
        }
    )
    assert network.name == "bridge"
    assert network.ipam == {
        "Driver": "default",
        "Config": [{"Subnet": "172.17.0.0/16"}],
    }
    assert network.options is None
