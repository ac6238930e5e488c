# catalog_service/app.py - HTTP surface of the product catalog
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, File, Form, Header, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import otp as otp_service
from . import products as product_service
from .attachments import UPLOAD_URL_PATH, ImageStore, Upload
from .config import CatalogConfig
from .database import get_db, init_db
from .errors import CatalogError
from .models import User
from .schemas import (
    LoginData,
    LoginResponse,
    OTPIssued,
    RegisterData,
    UserProfile,
    UserPublic,
    VerifyOTPData,
    dump,
    product_payload,
)
from .security import authenticate

logging.basicConfig(
    level=CatalogConfig.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# fail fast on a missing signing key
CatalogConfig.require_secret()


# --- Dependencies ---
def get_image_store() -> ImageStore:
    return ImageStore(CatalogConfig.UPLOAD_DIR)


def get_current_user(
    authorization: Optional[str] = Header(None), db: Session = Depends(get_db)
) -> User:
    return authenticate(db, authorization)


def get_base_url(request: Request) -> str:
    return CatalogConfig.PUBLIC_BASE_URL or str(request.base_url).rstrip("/")


def read_uploads(images: Optional[List[UploadFile]], max_bytes: int) -> List[Upload]:
    uploads = []
    for image in images or []:
        # browsers send an empty part when no file was picked
        if not image.filename:
            continue
        # one byte past the limit is enough to reject the file
        data = image.file.read(max_bytes + 1)
        uploads.append(Upload(image.filename, image.content_type or "", data))
    return uploads


def _issued(message: str, otp: str, user: User) -> dict:
    body = OTPIssued(
        message=message,
        otp=otp if CatalogConfig.OTP_ECHO else None,
        user_id=user.id,
    )
    return body.model_dump(by_alias=True, exclude_none=True)


# ------------------------------------------------------------------
# --- APPLICATION SETUP ---
# ------------------------------------------------------------------
# --- CREATE TABLES ON STARTUP ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    get_image_store().ensure_root()
    logger.info("Database tables checked/created, uploads at %s", CatalogConfig.UPLOAD_DIR)
    yield


app = FastAPI(title="Product Catalog Service", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CatalogConfig.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount(
    UPLOAD_URL_PATH,
    StaticFiles(directory=CatalogConfig.UPLOAD_DIR, check_dir=False),
    name="uploads",
)

auth_router = APIRouter(prefix="/auth", tags=["Authentication"])
product_router = APIRouter(prefix="/products", tags=["Products"])


# --- ERROR RENDERING ---
def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    return _error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = ", ".join(".".join(str(p) for p in err["loc"][1:]) or "body" for err in exc.errors())
    return _error(status.HTTP_400_BAD_REQUEST, f"Invalid request: {fields}")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


# ------------------------------------------------------------------
# --- AUTH ROUTES ---
# ------------------------------------------------------------------
@auth_router.post("/login")
def login(data: LoginData, db: Session = Depends(get_db)):
    otp, user = otp_service.request_code(db, data.email_or_phone)
    return _issued("OTP sent successfully", otp, user)


@auth_router.post("/verify-otp")
def verify_otp(data: VerifyOTPData, db: Session = Depends(get_db)):
    token, user = otp_service.verify_code(db, data.user_id, data.otp)
    body = LoginResponse(
        message="Login successful", token=token, user=UserPublic.model_validate(user)
    )
    return dump(body)


@auth_router.post("/register", status_code=status.HTTP_201_CREATED)
def register(data: RegisterData, db: Session = Depends(get_db)):
    otp, user = otp_service.register(db, data.email_or_phone, data.name, data.password)
    return _issued("User registered successfully. OTP sent.", otp, user)


@auth_router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {"success": True, "user": dump(UserProfile.model_validate(user))}


# ------------------------------------------------------------------
# --- PRODUCT ROUTES ---
# ------------------------------------------------------------------
@product_router.get("")
def list_products(
    isPublished: Optional[str] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    flag = None if isPublished is None else isPublished.strip().lower() == "true"
    items = product_service.list_products(db, user, flag)
    return {
        "success": True,
        "count": len(items),
        "products": [product_payload(p) for p in items],
    }


@product_router.get("/{product_id}")
def get_product(
    product_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    product = product_service.get_product(db, user, product_id)
    return {"success": True, "product": product_payload(product)}


@product_router.post("", status_code=status.HTTP_201_CREATED)
def create_product(
    request: Request,
    productName: Optional[str] = Form(None),
    productType: Optional[str] = Form(None),
    quantityStock: Optional[str] = Form(None),
    mrp: Optional[str] = Form(None),
    sellingPrice: Optional[str] = Form(None),
    brandName: Optional[str] = Form(None),
    exchangeEligibility: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
):
    fields = {
        "productName": productName,
        "productType": productType,
        "quantityStock": quantityStock,
        "mrp": mrp,
        "sellingPrice": sellingPrice,
        "brandName": brandName,
        "exchangeEligibility": exchangeEligibility or None,
    }
    uploads = read_uploads(images, store.max_bytes)
    product = product_service.create_product(
        db, store, user, fields, uploads, get_base_url(request)
    )
    return {
        "success": True,
        "message": "Product created successfully",
        "product": product_payload(product),
    }


@product_router.put("/{product_id}")
def update_product(
    product_id: str,
    request: Request,
    productName: Optional[str] = Form(None),
    productType: Optional[str] = Form(None),
    quantityStock: Optional[str] = Form(None),
    mrp: Optional[str] = Form(None),
    sellingPrice: Optional[str] = Form(None),
    brandName: Optional[str] = Form(None),
    exchangeEligibility: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
):
    # blank text inputs leave the stored value alone, numbers are applied as sent
    fields = {
        "productName": productName or None,
        "productType": productType or None,
        "quantityStock": quantityStock,
        "mrp": mrp,
        "sellingPrice": sellingPrice,
        "brandName": brandName or None,
        "exchangeEligibility": exchangeEligibility or None,
    }
    uploads = read_uploads(images, store.max_bytes)
    product = product_service.update_product(
        db, store, user, product_id, fields, uploads, get_base_url(request)
    )
    return {
        "success": True,
        "message": "Product updated successfully",
        "product": product_payload(product),
    }


@product_router.delete("/{product_id}")
def delete_product(
    product_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
):
    product_service.delete_product(db, store, user, product_id)
    return {"success": True, "message": "Product deleted successfully"}


@product_router.patch("/{product_id}/publish")
def toggle_publish(
    product_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    product = product_service.toggle_publish(db, user, product_id)
    state = "published" if product.is_published else "unpublished"
    return {
        "success": True,
        "message": f"Product {state} successfully",
        "product": product_payload(product),
    }


# Health check endpoint
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "Catalog backend is running"}


# ------------------------------------------------------------------
# --- INCLUDE ROUTERS (must be at the END) ---
# ------------------------------------------------------------------
app.include_router(auth_router, prefix=CatalogConfig.API_PREFIX)
app.include_router(product_router, prefix=CatalogConfig.API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("catalog_service.app:app", host="127.0.0.1", port=8000, reload=True)
