from datetime import datetime
from pydantic import BaseModel, Field


class UserCredentials(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=1024)


class RegisterResponse(BaseModel):
    message: str = "User registered successfully"


class TokenResponse(BaseModel):
    token: str


class EchoRequest(BaseModel):
    user_text: str = Field(..., min_length=1)


class EchoResponse(BaseModel):
    username: str
    user_text: str
    gpt_reply: str
    formatted_message: str


class MessageResponse(BaseModel):
    id: int
    username: str
    user_text: str
    gpt_reply: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class IdentityResponse(BaseModel):
    username: str
    issued_at: datetime
    expires_at: datetime
