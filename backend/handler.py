# handler.py
import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.security import OAuth2PasswordBearer
from firebase_admin import auth
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.config import AppConfig
from core.errors import AuthError, ResumeBuilderError
from core.logging_config import configure_logging
from core.models import ResumeDocument, ResumeFormState
from core.resume_store import FirestoreResumeStore, JsonFileResumeStore, init_firebase
from core.resume_workflow import ResumeWorkflow, export_filename

MEDIA_TYPES = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    return AppConfig.from_env()


@lru_cache(maxsize=1)
def get_workflow() -> ResumeWorkflow:
    config = get_config()
    if config.store_backend == "json":
        store = JsonFileResumeStore(config.store_path)
    else:
        init_firebase(config.firebase_credentials)
        store = FirestoreResumeStore()
    return ResumeWorkflow(store, config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_config()
    configure_logging(config.log_level)
    init_firebase(config.firebase_credentials)
    logging.info(f"Resume API starting (store={config.store_backend}, ai_available={config.ai_available})")
    yield


# --- FastAPI App Initialization ---
app = FastAPI(
    title="AI Resume Studio API",
    description="""
    Backend for the resume builder.

    - Firebase authentication (Bearer ID token)
    - One persisted resume per user, saved as markdown
    - AI-assisted rewriting of individual resume fields with Gemini
    - PDF/DOCX export of the structured resume
    """,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8080",
        "http://127.0.0.1:8080",
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
    expose_headers=["Content-Disposition"],
)


@app.exception_handler(ResumeBuilderError)
async def handle_resume_builder_error(request: Request, exc: ResumeBuilderError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logging.error(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "An unexpected error occurred. Please try again later.",
            "error_code": "INTERNAL_ERROR",
            "details": {},
        },
    )


# --- Security Dependency ---
# auto_error=False: a missing token is not an error by itself; each operation
# decides what an anonymous caller gets.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


class User(BaseModel):
    """Pydantic model to represent user data from a Firebase token."""
    uid: str
    email: Optional[str] = None
    name: Optional[str] = None


def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[User]:
    """
    Verifies the Firebase ID token, if any, and returns the user.

    Returns None for a missing, expired or malformed token; operations that
    need a user turn that into an AuthError.
    """
    if not token:
        return None
    try:
        decoded_token = auth.verify_id_token(token)
    except Exception as e:
        logging.warning(f"Token verification failed: {type(e).__name__}: {e}")
        return None
    return User(uid=decoded_token.get("uid"), email=decoded_token.get("email"), name=decoded_token.get("name"))


# --- Request / Response Models ---

class _CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SaveResumeRequest(_CamelRequest):
    content: Any = None


class ImproveRequest(_CamelRequest):
    current: Any = None
    type: Any = None


class ImproveResponse(BaseModel):
    success: bool = True
    improved: str
    message: str = "Content improved successfully"


class FormStateRequest(_CamelRequest):
    form_state: ResumeFormState = Field(default_factory=ResumeFormState)
    display_name: Optional[str] = None


def _user_id(user: Optional[User]) -> Optional[str]:
    return user.uid if user else None


def _display_name(body: FormStateRequest, user: Optional[User]) -> Optional[str]:
    return body.display_name or (user.name if user else None)


# --- API Endpoints ---

@app.get("/health")
async def health():
    return {"message": "Health OK"}


@app.get("/api/ai/status")
def ai_status(workflow: ResumeWorkflow = Depends(get_workflow)) -> Dict[str, Any]:
    return workflow.ai_status()


@app.get("/api/resume", response_model=Optional[ResumeDocument])
def get_resume(current_user: Optional[User] = Depends(get_current_user),
               workflow: ResumeWorkflow = Depends(get_workflow)):
    """Returns the caller's resume, or null when there is none or the caller is anonymous."""
    return workflow.load(_user_id(current_user))


@app.put("/api/resume", response_model=ResumeDocument)
def save_resume(body: SaveResumeRequest,
                current_user: Optional[User] = Depends(get_current_user),
                workflow: ResumeWorkflow = Depends(get_workflow)):
    return workflow.save(_user_id(current_user), body.content)


@app.post("/api/resume/improve", response_model=ImproveResponse)
def improve_content(body: ImproveRequest,
                    current_user: Optional[User] = Depends(get_current_user),
                    workflow: ResumeWorkflow = Depends(get_workflow)):
    improved = workflow.rewrite_field(_user_id(current_user), body.current, body.type)
    return ImproveResponse(improved=improved)


@app.post("/api/resume/assemble")
def assemble_resume(body: FormStateRequest,
                    current_user: Optional[User] = Depends(get_current_user),
                    workflow: ResumeWorkflow = Depends(get_workflow)):
    return {"content": workflow.assemble(body.form_state, _display_name(body, current_user))}


@app.post("/api/resume/export")
def export_resume(body: FormStateRequest,
                  fmt: str = Query("pdf", alias="format", pattern="^(pdf|docx)$"),
                  current_user: Optional[User] = Depends(get_current_user),
                  workflow: ResumeWorkflow = Depends(get_workflow)):
    if current_user is None:
        raise AuthError("Please log in to download your resume")
    display_name = _display_name(body, current_user)
    artifact = workflow.export(body.form_state, display_name, fmt)
    filename = export_filename(display_name, fmt)
    return Response(
        content=artifact,
        media_type=MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

# To run this app:
#   uvicorn backend.handler:app --reload
# or: python main.py serve
