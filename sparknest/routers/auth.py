from fastapi import APIRouter, Depends

from ..dependencies import get_storage
from ..schemas.auth import AuthResponse, LoginRequest, MessageResponse, SignupRequest, VerifyOTPRequest
from ..services import auth as auth_service
from ..storage import DatabaseStorage

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=MessageResponse)
async def signup(payload: SignupRequest, storage: DatabaseStorage = Depends(get_storage)):
    """Validate the signup payload and email an OTP. No account is created yet."""
    message = await auth_service.start_signup(storage, payload)
    return MessageResponse(message=message)


@router.post("/verify-otp", response_model=AuthResponse)
def verify_otp(payload: VerifyOTPRequest, storage: DatabaseStorage = Depends(get_storage)):
    return auth_service.verify_signup(storage, payload)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, storage: DatabaseStorage = Depends(get_storage)):
    return auth_service.login(storage, payload)


@router.post("/resend-otp", response_model=MessageResponse)
async def resend_otp(payload: SignupRequest, storage: DatabaseStorage = Depends(get_storage)):
    """Issue a fresh code for a re-submitted signup payload; older codes stay valid until expiry."""
    message = await auth_service.start_signup(storage, payload)
    return MessageResponse(message=message)
