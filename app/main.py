import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.core.exceptions import (
    NotFoundException,
    PersistenceException,
    RedirectException,
    ReferentialConflictException,
    UnauthenticatedException,
    UnauthorizedException,
    ValidationException,
)
from app.database import init_db
from app.routes import (
    auth_routes,
    category_routes,
    customer_routes,
    customer_quote_routes,
    financial_account_routes,
    page_routes,
    product_routes,
    purchase_invoice_routes,
    sale_routes,
    service_routes,
    settings_routes,
    shipment_routes,
    supplier_quote_routes,
    supplier_routes,
    team_routes,
    transaction_routes,
    webhook_routes,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DB_AUTO_CREATE:
        init_db()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
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
        expose_headers=["X-Invalidated-Views"],
    )


# Exception handlers
@app.exception_handler(UnauthenticatedException)
async def unauthenticated_exception_handler(request: Request, exc: UnauthenticatedException):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException):
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"error": str(exc)})


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request: Request, exc: NotFoundException):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)})


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    content = {"error": str(exc)}
    if exc.fields:
        content["fields"] = exc.fields
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


@app.exception_handler(ReferentialConflictException)
async def conflict_exception_handler(request: Request, exc: ReferentialConflictException):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"error": str(exc)})


@app.exception_handler(PersistenceException)
async def persistence_exception_handler(request: Request, exc: PersistenceException):
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": str(exc)})


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    # Reads that fail outside the repository commit path
    logger.exception("Unhandled database error", extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": PersistenceException().args[0]},
    )


@app.exception_handler(RedirectException)
async def redirect_exception_handler(request: Request, exc: RedirectException):
    return RedirectResponse(exc.location, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    fields = {}
    for error in exc.errors():
        # Drop the "body"/"query" prefix from the location
        location = [str(part) for part in error["loc"][1:]] or [str(error["loc"][0])]
        fields.setdefault(".".join(location), error["msg"])
    logger.debug("Request rejected", extra={"path": request.url.path, "fields": fields})
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "Invalid fields", "fields": fields},
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
app.include_router(auth_routes.router, prefix="/api/auth", tags=["Auth"])
app.include_router(auth_routes.users_router, prefix="/api/users", tags=["Auth"])
app.include_router(team_routes.router, prefix="/api/team", tags=["Team"])
app.include_router(category_routes.router, prefix="/api/categories", tags=["Categories"])
app.include_router(financial_account_routes.router, prefix="/api/financial-accounts", tags=["Financial accounts"])
app.include_router(supplier_routes.router, prefix="/api/suppliers", tags=["Suppliers"])
app.include_router(supplier_quote_routes.router, prefix="/api/supplier-quotes", tags=["Supplier quotes"])
app.include_router(customer_routes.router, prefix="/api/customers", tags=["Customers"])
app.include_router(customer_quote_routes.router, prefix="/api/quotes", tags=["Quotes"])
app.include_router(product_routes.router, prefix="/api/products", tags=["Products"])
app.include_router(purchase_invoice_routes.router, prefix="/api/purchase-invoices", tags=["Stock entries"])
app.include_router(service_routes.router, prefix="/api/services", tags=["Services"])
app.include_router(transaction_routes.router, prefix="/api/transactions", tags=["Transactions"])
app.include_router(sale_routes.router, prefix="/api/sales", tags=["Sales"])
app.include_router(shipment_routes.router, prefix="/api/shipments", tags=["Logistics"])
app.include_router(settings_routes.router, prefix="/api/settings", tags=["Settings"])
app.include_router(webhook_routes.router, prefix="/api/webhooks", tags=["Webhooks"])
app.include_router(page_routes.dashboard_router, prefix=settings.DASHBOARD_PATH, tags=["Pages"])
app.include_router(page_routes.operator_router, prefix=settings.OPERATOR_PATH, tags=["Pages"])
app.include_router(page_routes.auth_pages_router, tags=["Pages"])
