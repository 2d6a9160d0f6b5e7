from pydantic import BaseModel, Field
from typing import Annotated, Any, Literal, Union


class Success(BaseModel):
    kind: Literal["success"] = "success"
    value: Any = None

    @property
    def ok(self) -> bool:
        return True


class ValidationFailure(BaseModel):
    """Input rejected before any remote call was made."""

    kind: Literal["validation_failure"] = "validation_failure"
    reason: str

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return self.reason


class RemoteFailure(BaseModel):
    """The platform or model API rejected the call or could not be reached."""

    kind: Literal["remote_failure"] = "remote_failure"
    message: str

    @property
    def ok(self) -> bool:
        return False


Outcome = Annotated[Union[Success, ValidationFailure, RemoteFailure], Field(discriminator="kind")]
