from fastapi import APIRouter

from settings_api.controllers import auth_controller
from settings_api.schemas.auth_schema import SignIn, TokenResponse

router = APIRouter(tags=["Auth"])

@router.post("/signin", response_model=TokenResponse, summary="Exchange credentials for a token")
async def sign_in(credentials: SignIn):
    return await auth_controller.sign_in(credentials)
