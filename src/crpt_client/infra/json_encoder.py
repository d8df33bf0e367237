from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from ..core.domain.errors import EncodingError
from ..core.ports.encoder_port import EncoderPort


def _default(obj: Any) -> Any:
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class JsonEncoder(EncoderPort):
    """Serialize payloads to UTF-8 JSON.

    Pydantic models are dumped with their aliases (e.g. ``importRequest``);
    plain mappings and lists go through ``json`` with ISO-8601 dates.
    """

    def encode(self, payload: Any) -> bytes:
        try:
            if isinstance(payload, BaseModel):
                return payload.model_dump_json(by_alias=True).encode("utf-8")
            return json.dumps(payload, default=_default, ensure_ascii=False, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError, RecursionError, PydanticSerializationError) as e:
            raise EncodingError(f"Cannot encode payload of type {type(payload).__name__}: {e}") from e
