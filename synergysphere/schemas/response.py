#synergysphere/schemas/response.py
from pydantic import BaseModel, Field

class ErrorResponse(BaseModel):
    """
    ErrorResponse — стандартная структура ошибки: HTTP-статус и сообщение для клиента.
    """
    status: int = Field(..., description="HTTP status code")
    message: str = Field(..., description="Сообщение об ошибке")

class MessageResponse(BaseModel):
    """
    MessageResponse — простое сообщение для подтверждения действия.
    """
    message: str = Field(..., description="Текстовое сообщение")
