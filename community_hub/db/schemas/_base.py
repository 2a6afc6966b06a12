from pydantic import BaseModel, ConfigDict

class OrmModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ActionResult(BaseModel):
    success: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> "ActionResult":
        return cls(success=True)

    @classmethod
    def fail(cls, error: str) -> "ActionResult":
        return cls(success=False, error=error)
