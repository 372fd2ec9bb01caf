"""
Standard API response helpers.

Provides consistent response formatting for success cases. Error
responses are rendered by the exception handlers in
common.utils.exception_handlers.

Example:
    from common.utils import success_response

    @router.get("/users/{user_id}")
    async def get_user(user_id: str, user_service: UserService = Depends(get_user_service)):
        user = await user_service.find_one(user_id)
        return success_response(user)
"""

from typing import Any, Optional, Dict


def success_response(
    data: Any = None,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a standard success response.

    Args:
        data: The response data (can be dict, list, or any serializable type)
        message: Optional success message

    Returns:
        Dictionary with success=True and optional data/message
    """
    response: Dict[str, Any] = {"success": True}

    if data is not None:
        response["data"] = data

    if message:
        response["message"] = message

    return response
