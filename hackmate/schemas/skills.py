from pydantic import BaseModel, ConfigDict


class Skill(BaseModel):
    id: str
    name: str
    category: str

    model_config = ConfigDict(from_attributes=True, frozen=True)
