"""
Exception handling.

Domain code raises DraftStateError for illegal lifecycle moves; the API layer
maps it to a 400 through BusinessError. Internal details are logged, never
returned to the client.
"""
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class DraftStateError(Exception):
    """Illegal draft lifecycle transition (e.g. editing a POSTED draft)."""

    def __init__(self, draft_id: int, current_status: str, action: str):
        self.draft_id = draft_id
        self.current_status = current_status
        self.action = action
        super().__init__(f"Cannot {action} draft {draft_id}: status is {current_status}")


class UnresolvedClarificationsError(DraftStateError):
    """Confirm attempted while clarifications are still open."""

    def __init__(self, draft_id: int, current_status: str, prompts: list):
        self.prompts = prompts
        super().__init__(draft_id, current_status, "confirm")
        self.args = (f"Draft {draft_id} has {len(prompts)} open question(s): {'; '.join(prompts)}",)


class BusinessError:
    """Business-domain exceptions with safe (non-leaky) messages."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> HTTPException:
        """
        Generic 404.

        Example:
            if not draft:
                raise BusinessError.not_found("Draft")
        """
        if reason:
            logger.warning(f"Not found: {resource} - {reason}")

        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )

    @staticmethod
    def bad_request(detail) -> HTTPException:
        """
        400 for input validation / business logic errors.

        OK to include specific details here since user caused the issue.
        Examples: "Draft already POSTED", open clarification prompts
        """
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def invalid_state(error: DraftStateError) -> HTTPException:
        if isinstance(error, UnresolvedClarificationsError):
            return BusinessError.bad_request({"message": str(error), "open_prompts": error.prompts})
        return BusinessError.bad_request(str(error))
