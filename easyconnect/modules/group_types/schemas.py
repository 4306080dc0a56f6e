from pydantic import BaseModel, field_validator
from typing import Optional, List


class SubType(BaseModel):
    id: Optional[int] = None
    name: str
    description: str = ""

    # The id is optional in stored data, so identity is the visible pair
    def __eq__(self, other):
        if not isinstance(other, SubType):
            return NotImplemented
        return (self.name, self.description) == (other.name, other.description)

    def __hash__(self):
        return hash((self.name, self.description))


class GroupType(BaseModel):
    id: int
    group_type: str
    sub_types: List[SubType] = []

    @field_validator("sub_types", mode="before")
    @classmethod
    def null_sub_types(cls, value):
        return value or []
