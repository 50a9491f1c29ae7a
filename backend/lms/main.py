from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from lms.core.config import settings
from lms.routers import audit_logs, certificates, coupons, courses, enrollments, users

OPENAPI_TAGS = [
    {"name": "Users", "description": "Register and look up students, instructors and admins."},
    {"name": "Courses", "description": "Create and browse the course catalog."},
    {"name": "Enrollments", "description": "Enroll students and record course progress."},
    {"name": "Coupons", "description": "Create, validate and redeem course discount coupons."},
    {"name": "Certificates", "description": "Issue, verify, revoke and download certificates."},
    {"name": "Audit Logs", "description": "Query the audit trail for coupons and certificates."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Learning platform API for course discount coupons and "
        "course-completion certificates."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


@app.middleware("http")
async def options_handler(request: Request, call_next):  # type: ignore[no-untyped-def]
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "*")
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": "*",
                "Access-Control-Allow-Headers": "*",
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Max-Age": "86400",
            },
        )
    return await call_next(request)


app.include_router(users.router, prefix="/v1/users", tags=["Users"])
app.include_router(courses.router, prefix="/v1/courses", tags=["Courses"])
app.include_router(enrollments.router, prefix="/v1/enrollments", tags=["Enrollments"])
app.include_router(coupons.router, prefix="/v1/coupons", tags=["Coupons"])
app.include_router(certificates.router, prefix="/v1/certificates", tags=["Certificates"])
app.include_router(audit_logs.router, prefix="/v1/audit_logs", tags=["Audit Logs"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }
