"""JSON envelope written by `dansbag validate --json` and `dansbag rules --json`.

    {"success": true, "command": "validate", "data": {<verdict>}}
    {"success": false, "command": "validate", "data": {...}, "errors": [{"type", "message", "code"}]}

A non-compliant bag still yields success=true with the verdict in data.
success=false means the request itself failed; after a fatal abort data
holds the partial report under "report".
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from dansbag_cli.errors import DansBagError


@dataclass
class ErrorDetail:
    """One entry of the errors array, built from a DansBagError."""

    type: str
    message: str
    code: str | None = None

    @classmethod
    def from_error(cls, err: DansBagError) -> ErrorDetail:
        return cls(type=type(err).__name__, message=err.message, code=err.code)

    def to_dict(self) -> dict[str, str]:
        result = {"type": self.type, "message": self.message}
        if self.code is not None:
            result["code"] = self.code
        return result


@dataclass
class OutputEnvelope:
    success: bool
    command: str
    data: dict[str, Any] | None
    errors: list[ErrorDetail] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Envelope as a dict; "errors" only appears on failed requests."""
        result: dict[str, Any] = {
            "success": self.success,
            "command": self.command,
            "data": self.data,
        }
        if self.errors is not None:
            result["errors"] = [e.to_dict() for e in self.errors]
        return result

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def success_envelope(command: str, data: dict[str, Any]) -> OutputEnvelope:
    return OutputEnvelope(success=True, command=command, data=data)


def error_envelope(
    command: str,
    errors: list[ErrorDetail],
    *,
    data: dict[str, Any] | None = None,
) -> OutputEnvelope:
    """Envelope for a request fault; data defaults to an empty dict."""
    return OutputEnvelope(
        success=False,
        command=command,
        data=data if data is not None else {},
        errors=errors,
    )
