# app/main.py

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, Depends
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import RedirectResponse

from . import auth, expenses
from .auth import get_current_user
from .config import LOGIN_URL, SECRET_KEY
from .database import get_db, init_db
from .errors import ConcurrencyConflict, Forbidden, NotFound, Unauthenticated, ValidationError
from .logger import get_logger

logger = get_logger(__name__)

BASE_DIR = Path(__file__).resolve().parent


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables if not already created
    init_db()
    yield


app = FastAPI(lifespan=lifespan)

app.add_middleware(SessionMiddleware, secret_key=SECRET_KEY)

# Jinja2 template directory
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

# Include auth routes (login/register/logout)
app.include_router(auth.router)


@app.exception_handler(Unauthenticated)
async def unauthenticated_handler(request: Request, exc: Unauthenticated):
    return RedirectResponse(LOGIN_URL, status_code=302)


# 403/404 never carry anything about the row
@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return PlainTextResponse("Not Found", status_code=404)


@app.exception_handler(Forbidden)
async def forbidden_handler(request: Request, exc: Forbidden):
    return PlainTextResponse("Forbidden", status_code=403)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


def _form_from_expense(expense) -> dict:
    return {
        "id": expense.id,
        "version": expense.version_id,
        "description": expense.description,
        "amount": f"{expense.amount:.2f}",
        "category": expense.category,
        "date": expense.date.strftime("%Y-%m-%dT%H:%M"),
    }


@app.get("/")
def home():
    return RedirectResponse("/Expense", status_code=302)


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/Expense")
def expense_index(
    request: Request,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = expenses.list_for_user(db, user_id)
    return templates.TemplateResponse(
        request, "expense/index.html", {"expenses": rows}
    )


@app.get("/Expense/Create")
def expense_create_form(request: Request, user_id: str = Depends(get_current_user)):
    if not user_id:
        raise Unauthenticated()
    return templates.TemplateResponse(
        request, "expense/create.html", {"form": {}, "errors": {}}
    )


@app.post("/Expense/Create")
async def expense_create(
    request: Request,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    form = dict(await request.form())
    try:
        expenses.create(db, user_id, form)
    except ValidationError as exc:
        return templates.TemplateResponse(
            request, "expense/create.html", {"form": form, "errors": exc.errors}
        )
    return RedirectResponse("/Expense", status_code=302)


@app.get("/Expense/Edit/{expense_id}")
def expense_edit_form(
    expense_id: int,
    request: Request,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    expense = expenses.get_for_edit(db, user_id, expense_id)
    return templates.TemplateResponse(
        request,
        "expense/edit.html",
        {"expense_id": expense_id, "form": _form_from_expense(expense), "errors": {}},
    )


@app.post("/Expense/Edit/{expense_id}")
async def expense_edit(
    expense_id: int,
    request: Request,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    form = dict(await request.form())
    context = {"expense_id": expense_id, "form": form, "errors": {}}
    try:
        expenses.edit(db, user_id, expense_id, form)
    except ValidationError as exc:
        context["errors"] = exc.errors
        return templates.TemplateResponse(request, "expense/edit.html", context)
    except ConcurrencyConflict:
        context["conflict"] = True
        return templates.TemplateResponse(
            request, "expense/edit.html", context, status_code=409
        )
    return RedirectResponse("/Expense", status_code=302)


@app.api_route("/Expense/Delete/{expense_id}", methods=["GET", "POST"])
def expense_delete(
    expense_id: int,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    expenses.delete(db, user_id, expense_id)
    return RedirectResponse("/Expense", status_code=302)
