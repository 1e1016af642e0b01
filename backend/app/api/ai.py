"""AI doubt-solving chat for the problem page"""
import time

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.deps import get_doubt_solver, require_user
from app.middleware.monitoring import record_ai_request
from app.models.user import User
from app.schemas.chat import ChatRequest, ChatResponse
from app.services.doubt_solver import DoubtSolver
from app.utils.errors import MissingFieldsError, ServiceUnavailableError
from app.utils.logger import logger

router = APIRouter(prefix="/ai", tags=["ai"])

UNAVAILABLE_MESSAGE = "AI service temporarily unavailable. Please try again."


@router.post("/chat", response_model=ChatResponse)
def chat(
    request: ChatRequest,
    solver: DoubtSolver = Depends(get_doubt_solver),
    user: User = Depends(require_user),
):
    """
    Ask the tutor about the current problem.

    The client sends the whole conversation each time along with the problem
    title and, optionally, its description, test cases and starter code. The
    tutor gives hints and explanations rather than full solutions.
    """
    start = time.time()
    try:
        reply = solver.solve(
            messages=request.messages,
            title=request.title,
            description=request.description,
            test_cases=request.test_cases,
            start_code=request.start_code,
        )
    except MissingFieldsError as exc:
        record_ai_request("rejected")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": exc.message},
        )
    except ServiceUnavailableError:
        record_ai_request("unavailable", time.time() - start)
        logger.error(
            "Doubt-solving call failed",
            extra={"user_id": user.user_id, "action": "ai_chat"},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": UNAVAILABLE_MESSAGE},
        )

    record_ai_request("success", time.time() - start)
    return ChatResponse(success=True, message=reply)
