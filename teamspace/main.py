from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from teamspace.api.endpoints import auth, invitations, organizations, users
from teamspace.api.error_handlers import register_error_handlers
from teamspace.core.config import settings
from teamspace.core.logging import init_sentry, setup_logging
from teamspace.db.session import create_all_tables
from teamspace.middleware.logging import AccessLoggingMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        await create_all_tables()
    yield


app = FastAPI(
    title=f"{settings.APP_NAME} API - Multi-Tenant System",
    description="""
## Authentication

Sessions are signed tokens sent as `Authorization: Bearer <token>` or in the
`session_token` cookie set by `POST /api/auth/login`.

### Swagger UI:

1. **Register** with `POST /api/auth/register`
2. Click **Authorize** and enter your **email** in the `username` field and your password
3. Leave `client_id` and `client_secret` empty

## Multi-Tenant Architecture

- **Organizations**: tenant boundary, each with a single owner
- **Memberships**: per-organization roles (ADMIN, MEMBER)
- **Invitations**: email invitations with expiring tokens

Protected endpoints show a lock icon.
    """,
    version="2.0.0",
    lifespan=lifespan,
)

# Initialize logging and error tracking
setup_logging()
init_sentry()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(AccessLoggingMiddleware, enabled=True)

register_error_handlers(app)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(organizations.router, prefix="/api/organizations", tags=["organizations"])
app.include_router(invitations.router, prefix="/api/invitations", tags=["invitations"])
app.include_router(users.router, prefix="/api/user", tags=["user"])


@app.get("/")
def root():
    return {"message": f"Welcome to the {settings.APP_NAME} API. See /docs for the OpenAPI schema"}


@app.get("/health")
def health():
    return {"status": "ok"}
