from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TypedDict, Union

from .const import METHOD_STATUS_UPDATE
from .exceptions import MalformedFrameError


# ----------------- Connection / printer state -----------------

@dataclass(frozen=True)
class ConnectionStatus:
    connected: bool = False
    connecting: bool = False
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"connected": self.connected, "connecting": self.connecting}
        if self.error is not None:
            d["error"] = self.error
        return d


DISCONNECTED = ConnectionStatus()
CONNECTING = ConnectionStatus(connecting=True)
CONNECTED = ConnectionStatus(connected=True)


class KlipperStatus(TypedDict):
    state: str
    state_message: str
    hostname: str
    klipper_path: str
    config_file: str
    software_version: str
    cpu_usage: float


# ----------------- Inbound frames -----------------
# Each wire message decodes into exactly one of these.

@dataclass(frozen=True)
class StatusUpdate:
    params: Any  # stored as-is, no field validation


@dataclass(frozen=True)
class Notification:
    method: str
    params: Any = None


@dataclass(frozen=True)
class RpcResult:
    id: Optional[str]
    result: Any = None


@dataclass(frozen=True)
class RpcError:
    id: Optional[str]
    code: int
    message: str


@dataclass(frozen=True)
class Unrecognized:
    payload: Dict[str, Any] = field(default_factory=dict)


Frame = Union[StatusUpdate, Notification, RpcResult, RpcError, Unrecognized]


def decode_frame(raw: Union[str, bytes]) -> Frame:
    """Decode one wire message. Raises MalformedFrameError for non-JSON or non-object payloads."""
    try:
        msg = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedFrameError(f"Invalid JSON frame: {e}") from e
    if not isinstance(msg, dict):
        raise MalformedFrameError(f"Frame is not a JSON object: {type(msg).__name__}")

    method = msg.get("method")
    if isinstance(method, str):
        if method == METHOD_STATUS_UPDATE:
            return StatusUpdate(msg.get("params"))
        return Notification(method, msg.get("params"))

    if "error" in msg:
        err = msg["error"]
        if (
            isinstance(err, dict)
            and isinstance(err.get("code"), int)
            and isinstance(err.get("message"), str)
        ):
            return RpcError(msg.get("id"), err["code"], err["message"])
        return Unrecognized(msg)

    if "result" in msg:
        return RpcResult(msg.get("id"), msg["result"])

    return Unrecognized(msg)


def encode_request(method: str, id: str, params: Optional[Dict[str, Any]] = None) -> str:
    frame: Dict[str, Any] = {"method": method, "id": id}
    if params is not None:
        frame["params"] = params
    return json.dumps(frame)


# ----------------- Network configuration service -----------------

class ValidationError(TypedDict):
    loc: List[Union[str, int]]
    msg: str
    type: str


class HTTPValidationError(TypedDict):
    detail: List[ValidationError]


class WiFiNetwork(TypedDict):
    ssid: str
    signal_strength: int
    security: str
    frequency: int
    is_hidden: bool


class WiFiConnectionRequest(TypedDict):
    ssid: str
    password: Optional[str]


class WiFiConnectionResult(TypedDict):
    success: bool
    ssid: str
    message: str
    status: str
    current_connection: Optional[str]
    previous_connection: Optional[str]


class NetworkAdapter(TypedDict):
    device: str
    type: str
    state: str
    connection: str


class NetworkAddress(TypedDict):
    ipv4: str
    ipv6: str
    mac: str


class SignalInfo(TypedDict):
    current_signal: int
    available_networks: int
    signal_range: str
    current_connection_signal: int
    current_ssid: str


class NetworkStatus(TypedDict):
    adapter: NetworkAdapter
    ip: NetworkAddress
    signal_info: SignalInfo


class NetworkScanResult(TypedDict):
    networks: List[WiFiNetwork]


class APIResponse(TypedDict, total=False):
    success: bool
    data: Any
    error: HTTPValidationError
    message: str
