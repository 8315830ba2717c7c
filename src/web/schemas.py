"""
Request bodies and JSON envelopes
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class AddDomainRequest(BaseModel):
    domain: str


def envelope(data: Any, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body = {"success": True, "data": data}
    if meta is not None:
        body["meta"] = meta
    return body


def dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode="json")
