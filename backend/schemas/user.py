from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from models.users import Role

# Schema for registration requests. Required fields and the email format are
# checked by the auth service so that the first missing field is reported by name.
class UserCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    college_id: Optional[str] = Field(None, alias="collegeId")
    password: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    role: Optional[Role] = None

    class Config:
        populate_by_name = True

# Schema for user authentication credentials
class UserLogin(BaseModel):
    email: Optional[str] = None
    college_id: Optional[str] = Field(None, alias="collegeId")
    identifier: Optional[str] = None
    password: Optional[str] = None

    class Config:
        populate_by_name = True

    def login_identifier(self) -> Optional[str]:
        return self.identifier or self.email or self.college_id

# Output schema for user profile details, never includes the password hash
class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    college_id: str
    phone: str
    department: str
    role: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Response for register and login
class AuthResponse(BaseModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"

# Verified JWT payload contents
class TokenData(BaseModel):
    subject_id: str
    role: str

# Schema for administrative role updates
class RoleUpdate(BaseModel):
    role: Role
