"""Registration and login endpoints"""

from fastapi import APIRouter, Depends

from finsight.api.dependencies import get_account_service
from finsight.api.schemas import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from finsight.services.accounts import AccountService

router = APIRouter()


@router.post("/auth/register", response_model=UserResponse, status_code=201)
def register(request_body: RegisterRequest, service: AccountService = Depends(get_account_service)):
    """Create an account; 409 when the username or email is taken"""
    user = service.register(
        username=request_body.username,
        email=request_body.email,
        password=request_body.password,
        full_name=request_body.full_name,
    )
    return UserResponse.from_record(user)


@router.post("/auth/login", response_model=LoginResponse)
def login(request_body: LoginRequest, service: AccountService = Depends(get_account_service)):
    result = service.login(request_body.username, request_body.password)
    return LoginResponse(
        token=result.token,
        user=UserResponse.from_record(result.user),
        demo_seeded=result.demo_seeded,
    )
