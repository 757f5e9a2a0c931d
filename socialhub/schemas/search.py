"""Search result views."""

import uuid

from pydantic import BaseModel


class HashtagResponse(BaseModel):
    id: uuid.UUID
    name: str
    count: int

    model_config = {"from_attributes": True}
