from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from bookkeeping.config import settings
from bookkeeping.core.exceptions import (
    UnauthorizedException,
    NotFoundException,
    ForbiddenException,
    ValidationException,
    UpgradeRequiredException,
)
from bookkeeping.core.logger import configure_logging
from bookkeeping.routes import (
    access_routes,
    admin_routes,
    business_routes,
    document_routes,
    goal_routes,
    report_routes,
    task_routes,
    transaction_routes,
    user_routes,
)

configure_logging(settings.LOG_LEVEL, settings.DEBUG)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
)

# CORS middleware
cors_origins = settings.cors_origins_list
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Exception handlers
@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request: Request, exc: NotFoundException):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(ForbiddenException)
async def forbidden_exception_handler(request: Request, exc: ForbiddenException):
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": str(exc)})


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(UpgradeRequiredException)
async def upgrade_required_exception_handler(request: Request, exc: UpgradeRequiredException):
    return JSONResponse(
        status_code=status.HTTP_402_PAYMENT_REQUIRED,
        content={
            "detail": str(exc),
            "feature": exc.feature,
            "current_tier": exc.current_tier,
        },
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


# Root endpoint
@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }


# Include routers
app.include_router(access_routes.router, prefix="/api/access", tags=["Access"])
app.include_router(business_routes.router, prefix="/api/businesses", tags=["Businesses"])
app.include_router(transaction_routes.router, prefix="/api/transactions", tags=["Transactions"])
app.include_router(report_routes.router, prefix="/api/reports", tags=["Reports"])
app.include_router(goal_routes.router, prefix="/api/goals", tags=["Goals"])
app.include_router(document_routes.router, prefix="/api/documents", tags=["Documents"])
app.include_router(task_routes.router, prefix="/api/tasks", tags=["Tasks"])
app.include_router(user_routes.router, prefix="/api/users", tags=["Users"])
app.include_router(admin_routes.router, prefix="/api/admin", tags=["Admin"])
