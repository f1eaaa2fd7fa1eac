from pydantic import BaseModel, Field
from typing import List


class ReorderRequest(BaseModel):
    ordered_ids: List[str] = Field(..., description="Every id in the collection, in the new order")


class BulkIdsRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1)


class SuccessResponse(BaseModel):
    success: bool = True


class CreatedResponse(BaseModel):
    id: str


class CreatedIdsResponse(BaseModel):
    ids: List[str]
