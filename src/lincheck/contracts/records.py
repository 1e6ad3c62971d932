# src/lincheck/contracts/records.py
"""On-disk operation record.

One record per line of newline-delimited JSON:

    {"action":"call","proc":1,"data":{...}}
    {"action":"return","proc":1,"data":{...}}
"""

from typing import Any

from pydantic import BaseModel, Field

from lincheck.contracts.enums import Action


class OperationRecord(BaseModel):
    """A single invocation or completion observed by the test driver.

    Records are appended once and never mutated. Unknown keys on read are
    ignored so that older readers accept newer writers.
    """

    model_config = {"frozen": True}

    action: Action = Field(description="Whether this is an invocation or a completion")
    proc: int = Field(strict=True, description="Logical client that issued the operation")
    data: Any = Field(description="JSON payload produced by the caller's encoding")

    def to_line(self) -> str:
        """Serialize to one compact JSON line without the trailing newline."""
        return self.model_dump_json()
