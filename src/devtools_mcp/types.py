from typing import TypedDict


class ConsoleLogEntry(TypedDict):
    level: str
    message: str
    timestamp: float
    source: str


class _NetworkLogEntryBase(TypedDict):
    method: str
    url: str
    timestamp: float


class NetworkLogEntry(_NetworkLogEntryBase, total=False):
    status: int
    requestHeaders: dict[str, str]
    responseHeaders: dict[str, str]
    duration: float
    transferSize: int
    encodedBodySize: int
    decodedBodySize: int
    error: str


class BoundingRect(TypedDict):
    x: float
    y: float
    width: float
    height: float


class _ElementInspectionBase(TypedDict):
    tagName: str
    text: str
    attributes: dict[str, str]
    boundingRect: BoundingRect


class ElementInspectionResult(_ElementInspectionBase, total=False):
    computedStyles: dict[str, str]


class PerformanceMetrics(TypedDict, total=False):
    navigationStart: float
    loadEventEnd: float
    domContentLoadedEventEnd: float
    firstPaint: float
    firstContentfulPaint: float


class PageInfo(TypedDict):
    url: str
    title: str
