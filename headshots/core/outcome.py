"""
Tagged results for calls to external providers.

A handler that substitutes placeholder data when a provider fails still
answers successfully, so every payload says whether it came from the
provider (`simulated=False`) or was fabricated locally (`simulated=True`).
"""
from pydantic import BaseModel
from typing import Any, Dict, Optional


class Outcome(BaseModel):
    data: Dict[str, Any]
    simulated: bool = False
    reason: Optional[str] = None

    @classmethod
    def real(cls, data: Dict[str, Any]) -> "Outcome":
        return cls(data=data)

    @classmethod
    def fabricated(cls, data: Dict[str, Any], reason: str) -> "Outcome":
        return cls(data=data, simulated=True, reason=reason)

    def to_response(self) -> Dict[str, Any]:
        body = dict(self.data)
        body["simulated"] = self.simulated
        if self.reason:
            body["reason"] = self.reason
        return body
