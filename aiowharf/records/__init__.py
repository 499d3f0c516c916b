from .container import ContainerInspect, ContainerSummary, FileInfo, Process
from .image import ImageHistory, ImageInspect, ImageMatch, ImagesDeleted, ImageSummary
from .network import NetworkSummary


__all__ = (
    "ContainerInspect",
    "ContainerSummary",
    "FileInfo",
    "ImageHistory",
    "ImageInspect",
    "ImageMatch",
    "ImageSummary",
    "ImagesDeleted",
    "NetworkSummary",
    "Process",
)
