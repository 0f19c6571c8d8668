from typing import Optional
from pydantic import BaseModel, EmailStr

from teamspace.schemas.user import UserOut


class Login(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginOut(Token):
    user: UserOut


class RegisterOut(BaseModel):
    message: str
    user: UserOut


class SessionUser(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    image: Optional[str] = None


class SessionOut(BaseModel):
    user: Optional[SessionUser] = None
