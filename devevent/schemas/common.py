"""
Common Pydantic schemas
"""

from typing import Dict, Optional
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    """Base model serialized with camelCase keys (createdAt, eventId)"""

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

class ErrorResponse(BaseModel):
    """Error response schema"""
    message: str
    error: Optional[str] = None
    errors: Optional[Dict[str, str]] = None
