import logging

from fastapi import APIRouter, Request, HTTPException, Depends
from fastapi.responses import JSONResponse

from models.models import User
from models.requests import UserRegister, LoginRequest, ProfileUpdate, PasswordChange
from services.RulesEngine import RulesEngine
from .dependencies import get_current_user, get_actor, get_rules_engine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post('/register', status_code=201)
async def register(payload: UserRegister, request: Request, rules: RulesEngine = Depends(get_rules_engine)):
    """Create an account and log it in"""
    user = await rules.register_user(payload)
    request.session.clear()
    request.session['user_id'] = user.id
    return JSONResponse(status_code=201, content=user.public())


@router.post('/login')
async def login(payload: LoginRequest, request: Request, rules: RulesEngine = Depends(get_rules_engine)):
    user = await rules.authenticate(payload.username, payload.password)
    if user is None:
        logger.warning("Failed login for %s", payload.username)
        raise HTTPException(status_code=401, detail="Invalid username or password")

    request.session.clear()
    request.session['user_id'] = user.id
    return JSONResponse(content=user.public())


@router.post('/logout')
async def logout(request: Request):
    request.session.pop('user_id', None)
    return JSONResponse(content={"message": "Logged out"})


@router.get('/user')
async def user_profile(user: User = Depends(get_current_user)):
    return JSONResponse(content=user.public())


@router.put('/user')
async def update_profile(payload: ProfileUpdate, actor = Depends(get_actor), rules: RulesEngine = Depends(get_rules_engine)):
    user = await rules.update_profile(actor, payload)
    return JSONResponse(content=user.public())


@router.put('/user/password')
async def change_password(payload: PasswordChange, actor = Depends(get_actor), rules: RulesEngine = Depends(get_rules_engine)):
    await rules.change_password(actor, payload)
    return JSONResponse(content={"message": "Password updated successfully"})


@router.get('/health')
async def health_check():
    """Simple health check endpoint"""
    return JSONResponse(content={"status": "healthy", "message": "Server is running"})
