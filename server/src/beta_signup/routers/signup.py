"""Beta signup endpoints: intake, email verification and questionnaire completion"""

import logging
from typing import Optional, Type, TypeVar, Union

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from beta_signup.errors import AuthorizationStateError, DependencyError, SignupError
from beta_signup.services.providers import get_signup_flow
from beta_signup.services.signup_flow import SignupFlow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Signup"])

SIGNUP_FAILED = "Failed to process signup"
CONFIRMATION_FAILED = "Failed to process confirmation"


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    why: Optional[str] = None
    recaptcha_token: Optional[str] = Field(default=None, alias="recaptchaToken")
    # Hidden from real users; anything here means a bot filled the form
    website: Optional[str] = None


class ConfirmRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: Optional[str] = None
    problem_category: Optional[str] = Field(default=None, alias="problemCategory")
    other_problem_text: Optional[str] = Field(default=None, alias="otherProblemText")
    pain_level: Optional[str] = Field(default=None, alias="painLevel")

    @field_validator("pain_level", mode="before")
    @classmethod
    def pain_level_as_text(cls, value: Union[str, int, None]) -> Optional[str]:
        # The page posts the slider value as a number; 0 means nothing was picked
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value) if value else None
        return value


RequestModel = TypeVar("RequestModel", bound=BaseModel)


async def _parse_body(request: Request, model: Type[RequestModel]) -> RequestModel:
    """Parse a JSON body, answering 400 for anything that isn't the expected shape"""
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid request body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Invalid request body")
    try:
        return model.model_validate(body)
    except PydanticValidationError:
        raise HTTPException(status_code=400, detail="Invalid request body")


def _client_address(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


@router.post("/signup")
async def signup(request: Request, flow: SignupFlow = Depends(get_signup_flow)):
    """Accept a beta application and send the verification email"""
    payload = await _parse_body(request, SignupRequest)

    try:
        return await flow.intake(
            email=payload.email,
            why=payload.why,
            recaptcha_token=payload.recaptcha_token,
            honeypot=payload.website,
            source_address=_client_address(request),
        )
    except DependencyError as e:
        logger.error(f"Signup error: {e.message}: {e.__cause__}")
        raise HTTPException(status_code=500, detail=SIGNUP_FAILED)
    except SignupError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Unexpected signup error: {type(e).__name__}: {e}")
        raise HTTPException(status_code=500, detail=SIGNUP_FAILED)


@router.get("/verify")
async def verify(token: Optional[str] = None, flow: SignupFlow = Depends(get_signup_flow)):
    """Verification link target; always answers with a redirect"""
    location = await flow.verify(token)
    return RedirectResponse(url=location, status_code=302)


@router.post("/confirm")
async def confirm(request: Request, flow: SignupFlow = Depends(get_signup_flow)):
    """Store the questionnaire answers of a verified applicant"""
    payload = await _parse_body(request, ConfirmRequest)

    try:
        return await flow.complete(
            token=payload.token,
            problem_category=payload.problem_category,
            pain_level=payload.pain_level,
            other_problem_text=payload.other_problem_text,
        )
    except DependencyError as e:
        logger.error(f"Confirmation error: {e.message}: {e.__cause__}")
        raise HTTPException(status_code=500, detail=CONFIRMATION_FAILED)
    except SignupError as e:
        if isinstance(e, AuthorizationStateError):
            logger.info(f"Confirmation rejected: {e.reason}")
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Unexpected confirmation error: {type(e).__name__}: {e}")
        raise HTTPException(status_code=500, detail=CONFIRMATION_FAILED)
