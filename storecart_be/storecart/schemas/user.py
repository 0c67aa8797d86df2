from pydantic import BaseModel, EmailStr
from typing import Optional


class RegisterSchema(BaseModel):
    firstName: str
    lastName: str
    email: EmailStr
    phone: Optional[str] = None
    password: str


class LoginSchema(BaseModel):
    email: EmailStr
    password: str
