"""
User-related Pydantic models
"""

from typing import Optional
from pydantic import BaseModel, Field


class UserPayload(BaseModel):
    """Incoming user body for POST and PUT requests"""
    id: Optional[int] = Field(None, description="Ignored for lookup; the path id is authoritative")
    version: Optional[int] = Field(None, description="Version of the record the client last saw")
    name: Optional[str] = None
    email: Optional[str] = None


class User(BaseModel):
    """A stored user record"""
    id: int
    version: int
    name: Optional[str] = None
    email: Optional[str] = None

    def update_from(self, payload: UserPayload):
        """Copy the mutable fields from an incoming payload, leaving id and version untouched"""
        self.name = payload.name
        self.email = payload.email
