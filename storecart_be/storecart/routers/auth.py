from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storecart.config import get_settings
from storecart.models.user import User, get_db
from storecart.schemas.user import RegisterSchema, LoginSchema
from storecart.utils.security import create_access_token

router = APIRouter()


@router.post("/register", status_code=201)
def register(user: RegisterSchema, db: Session = Depends(get_db)):
    existing = db.query(User).filter(User.email == user.email).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")
    new_user = User(
        first_name=user.firstName,
        last_name=user.lastName,
        email=user.email,
        phone=user.phone,
        password=user.password  # hash in real app
    )
    db.add(new_user)
    db.commit()
    return {"message": "User registered successfully"}


@router.post("/login")
def login(credentials: LoginSchema, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == credentials.email).first()
    if not user or user.password != credentials.password:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    token = create_access_token(subject=user.email)
    return {
        "access_token": token,
        "token_type": "bearer",
        "expires_in_minutes": get_settings().ACCESS_TOKEN_EXPIRE_MINUTES,
    }
