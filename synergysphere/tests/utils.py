from typing import Any, Dict

from synergysphere.core import security
from synergysphere.core.policy import Principal

TEST_PASSWORD = "testpassword"


def principal_of(user: Any) -> Principal:
    return Principal(id=user.id, role=user.role)


def auth_headers(user: Any) -> Dict[str, str]:
    """Заголовок Authorization с access-токеном пользователя."""
    token, _ = security.create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}
