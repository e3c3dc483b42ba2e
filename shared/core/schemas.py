from pydantic import BaseModel
from typing import Generic, List, Optional, TypeVar

# Shared properties
T = TypeVar("T")


class UserToken(BaseModel):
    user_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    hospital_id: Optional[str] = None
    roles: List[str] = []
    exp: Optional[int] = None


class JsonOutResult(BaseModel, Generic[T]):
    data: Optional[T] = None
    status: str
    status_code: str
    message: str
