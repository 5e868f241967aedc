# app/auth.py

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Request, Form, Depends
from fastapi.templating import Jinja2Templates
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from starlette.responses import RedirectResponse
from .database import get_db
from .logger import get_logger
from .models import User
import re

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

router = APIRouter()

logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

SESSION_KEY = "user_id"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def is_valid_email(email: str) -> bool:
    pattern = r"^[\w\.\-+]+@[\w\.-]+\.[A-Za-z]{2,}$"
    return re.match(pattern, email) is not None


# Dependency to get logged-in user
def get_current_user(request: Request, db: Session = Depends(get_db)) -> Optional[str]:
    user_id = request.session.get(SESSION_KEY)
    if not user_id:
        return None
    if db.get(User, user_id) is None:
        # session outlived its account (db reset, user removed)
        logger.warning("Session user %s no longer exists, clearing session", user_id)
        request.session.clear()
        return None
    return user_id


# Register (Signup)
@router.get("/register")
def register_form(request: Request):
    return templates.TemplateResponse(request, "register.html", {})


@router.post("/register")
def register(
    request: Request,
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    email = email.strip().lower()
    if not is_valid_email(email):
        return templates.TemplateResponse(
            request,
            "register.html",
            {"error": "Invalid email format (e.g. name@example.com).", "name": name},
        )

    user = db.query(User).filter(User.email == email).first()
    if user:
        return templates.TemplateResponse(
            request, "register.html", {"error": "Email already registered.", "name": name}
        )

    new_user = User(name=name.strip(), email=email, password=hash_password(password))
    db.add(new_user)
    db.commit()
    logger.info("Registered user %s", new_user.id)

    return RedirectResponse("/login", status_code=302)


@router.get("/login")
def login_form(request: Request):
    return templates.TemplateResponse(request, "login.html", {})


@router.post("/login")
def login(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user or not verify_password(password, user.password):
        logger.warning("Failed login for %s", email)
        return templates.TemplateResponse(
            request, "login.html", {"error": "Invalid email or password."}
        )

    request.session[SESSION_KEY] = user.id
    request.session["name"] = user.name
    return RedirectResponse("/Expense", status_code=302)


# Logout
@router.get("/logout")
def logout(request: Request):
    request.session.clear()
    return RedirectResponse("/", status_code=302)
