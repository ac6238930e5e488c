# catalog_service/products.py - owner scoped product lifecycle
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .attachments import ImageStore, Upload
from .config import CatalogConfig
from .errors import ForbiddenError, NotFoundError, UnexpectedError, ValidationError
from .models import Product, User
from .schemas import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


def _validation_message(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(loc) for loc in err["loc"])
        parts.append(f"{field}: {err['msg']}")
    return "Product validation failed: " + "; ".join(parts)


def _present(fields: Dict[str, Any]) -> Dict[str, Any]:
    # None means "not sent"; 0, "0" and False are real values
    return {k: v for k, v in (fields or {}).items() if v is not None}


def _check_image_count(count: int):
    if count > CatalogConfig.MAX_IMAGES_PER_PRODUCT:
        raise ValidationError(
            f"A product can have at most {CatalogConfig.MAX_IMAGES_PER_PRODUCT} images"
        )


def _commit(db: Session, action: str, store: Optional[ImageStore] = None, written=()):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error %s product", action)
        if store is not None and written:
            store.reclaim_all(written)
        raise UnexpectedError(f"Error {action} product")


def load_owned(db: Session, user: User, product_id: str) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    if product.created_by != user.id:
        logger.warning("User %s denied access to product %s", user.id, product_id)
        raise ForbiddenError("Not authorized to access this product")
    return product


def list_products(db: Session, user: User, is_published: Optional[bool] = None) -> List[Product]:
    query = db.query(Product).filter(Product.created_by == user.id)
    if is_published is not None:
        query = query.filter(Product.is_published == is_published)
    return query.order_by(Product.created_at.desc()).all()


def get_product(db: Session, user: User, product_id: str) -> Product:
    return load_owned(db, user, product_id)


def create_product(
    db: Session,
    store: ImageStore,
    user: User,
    fields: Dict[str, Any],
    uploads: Sequence[Upload] = (),
    base_url: Optional[str] = None,
) -> Product:
    try:
        data = ProductCreate.model_validate(_present(fields))
    except PydanticValidationError as e:
        raise ValidationError(_validation_message(e))
    _check_image_count(len(uploads))

    images = store.store(uploads, base_url)
    product = Product(
        product_name=data.product_name.strip(),
        product_type=data.product_type.value,
        quantity_stock=data.quantity_stock,
        mrp=data.mrp,
        selling_price=data.selling_price,
        brand_name=data.brand_name.strip(),
        images=images,
        exchange_eligibility=data.exchange_eligibility.value,
        is_published=False,
        created_by=user.id,
    )
    db.add(product)
    _commit(db, "creating", store, images)
    db.refresh(product)
    logger.info("User %s created product %s with %d images", user.id, product.id, len(images))
    return product


def update_product(
    db: Session,
    store: ImageStore,
    user: User,
    product_id: str,
    fields: Dict[str, Any],
    uploads: Sequence[Upload] = (),
    base_url: Optional[str] = None,
) -> Product:
    product = load_owned(db, user, product_id)
    try:
        data = ProductUpdate.model_validate(_present(fields))
    except PydanticValidationError as e:
        raise ValidationError(_validation_message(e))
    _check_image_count(len(product.images or []) + len(uploads))

    added = store.store(uploads, base_url) if uploads else []

    for name, value in data.model_dump(exclude_unset=True).items():
        if hasattr(value, "value"):
            value = value.value
        if isinstance(value, str):
            value = value.strip()
        setattr(product, name, value)

    if added:
        # new list object so the JSON column is flagged dirty
        product.images = list(product.images or []) + added

    _commit(db, "updating", store, added)
    db.refresh(product)
    logger.info("User %s updated product %s", user.id, product.id)
    return product


def delete_product(db: Session, store: ImageStore, user: User, product_id: str) -> int:
    """Delete the product, then reclaim its image files.

    Returns how many files were actually removed; missing files are not errors.
    """
    product = load_owned(db, user, product_id)
    images = list(product.images or [])
    db.delete(product)
    _commit(db, "deleting")
    removed = store.reclaim_all(images)
    logger.info(
        "User %s deleted product %s (%d/%d images reclaimed)",
        user.id,
        product_id,
        removed,
        len(images),
    )
    return removed


def toggle_publish(db: Session, user: User, product_id: str) -> Product:
    product = load_owned(db, user, product_id)
    product.is_published = not product.is_published
    _commit(db, "updating status of")
    db.refresh(product)
    logger.info(
        "User %s set product %s published=%s", user.id, product.id, product.is_published
    )
    return product
