# hamlet/routes/auth.py
from __future__ import annotations

import secrets
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from passlib.context import CryptContext
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hamlet.config import ADMIN_KEY, SESSION_HOURS, STARTING_BALANCE
from hamlet.database import get_db
from hamlet.game import ledger, registry
from hamlet.game.clock import Clock, get_clock
from hamlet.models.session import SessionToken
from hamlet.models.user import User

bearer_scheme = HTTPBearer()
router = APIRouter(prefix="/auth", tags=["auth"])

# Pi-friendly hashing (no native deps)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=32)
    password: str = Field(min_length=8, max_length=128)


class RegisterResponse(BaseModel):
    user_id: int
    username: str
    balance: int


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_at: datetime


class MeResponse(BaseModel):
    user_id: int
    username: str
    balance: int
    village_ids: list[int]


def get_current_user(
    creds: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> User:
    token = creds.credentials

    sess = db.query(SessionToken).filter(SessionToken.token == token).first()
    if not sess:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    if sess.expires_at <= clock.now():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")

    user = db.query(User).filter(User.id == sess.user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session user")

    return user


def is_admin(x_admin_key: str | None) -> bool:
    return bool(ADMIN_KEY) and bool(x_admin_key) and secrets.compare_digest(x_admin_key, ADMIN_KEY)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> RegisterResponse:
    existing = db.query(User).filter(User.username == payload.username).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already exists")

    now = clock.now()
    user = User(
        username=payload.username,
        password_hash=pwd_context.hash(payload.password),
        created_at=now,
    )
    db.add(user)
    db.flush()

    acct = ledger.open_account(
        db,
        ledger.holder_for_user(user.id),
        opening_balance=STARTING_BALANCE,
        now=now,
    )

    db.commit()
    db.refresh(user)

    return RegisterResponse(
        user_id=user.id,
        username=user.username,
        balance=int(acct.balance),
    )


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> LoginResponse:
    user = db.query(User).filter(User.username == payload.username).first()
    if not user or not pwd_context.verify(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

    now = clock.now()
    token = secrets.token_hex(32)
    expires_at = now + timedelta(hours=SESSION_HOURS)

    sess = SessionToken(
        user_id=user.id,
        token=token,
        created_at=now,
        expires_at=expires_at,
    )
    db.add(sess)
    db.commit()

    return LoginResponse(token=token, expires_at=expires_at)


@router.get("/me", response_model=MeResponse)
def me(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> MeResponse:
    return MeResponse(
        user_id=current_user.id,
        username=current_user.username,
        balance=ledger.balance_of(db, ledger.holder_for_user(current_user.id)),
        village_ids=registry.villages_owned_by(db, current_user.id),
    )
