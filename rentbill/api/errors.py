from __future__ import annotations

from collections.abc import Mapping
from typing import Any

STATUS_MESSAGES = {
    400: "Dữ liệu gửi lên không hợp lệ",
    409: "Dữ liệu đã tồn tại",
    422: "Dữ liệu không hợp lệ",
    500: "Lỗi máy chủ. Vui lòng thử lại sau",
}


class ApiError(Exception):
    """Raised by the HTTP client for any failed request."""

    def __init__(self, message: str, status: int | None = None, data: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data


def extract_data_message(data: Any) -> str | None:
    """Pull a human message out of an error body, if it carries one."""
    if isinstance(data, str):
        return data or None
    if isinstance(data, Mapping):
        message = data.get("message") or data.get("error") or data.get("msg")
        if isinstance(message, str):
            return message
        if isinstance(message, Mapping) and isinstance(message.get("message"), str):
            return message["message"]
        # validation errors come back as a list of messages
        if isinstance(message, list) and message and all(isinstance(m, str) for m in message):
            return "; ".join(message)
    return None


def extract_error_message(error: BaseException, default_message: str) -> str:
    if isinstance(error, ApiError):
        return (
            extract_data_message(error.data)
            or STATUS_MESSAGES.get(error.status or 0)
            or default_message
        )
    return default_message
