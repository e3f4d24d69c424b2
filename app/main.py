"""FastAPI application serving the inventory list and the product form."""
from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Form, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from loguru import logger
from pydantic import BaseModel, Field

from inventory_editor.config import AppConfig
from inventory_editor.data.records import (
    NewTarget,
    PageMode,
    ProductDetailPage,
    ProductSummary,
    parse_target,
)
from inventory_editor.errors import ProductNotFound
from inventory_editor.log_config import configure_logging
from inventory_editor.service.handlers import (
    SAVE_INTENT,
    Submission,
    WriteState,
    apply_submission,
    load_product_detail,
    load_product_list,
)
from inventory_editor.service.product_store import ProductStore
from inventory_editor.validation.rules import NO_ERRORS, FieldErrors

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

NOT_FOUND_DETAIL = "Product not found"


class ProductOut(BaseModel):
    id: str
    title: str
    quantity: int = Field(..., ge=0)

    @classmethod
    def from_summary(cls, product: ProductSummary) -> "ProductOut":
        return cls(id=product.id, title=product.title, quantity=product.quantity)


class ProductListResponse(BaseModel):
    products: List[ProductOut]


class ProductDetailResponse(BaseModel):
    product: ProductOut
    mode: PageMode


class SubmittedProduct(BaseModel):
    # Echoes what the user sent, so the quantity may be negative.
    id: str
    title: str
    quantity: int


class ValidationFailureResponse(BaseModel):
    errors: Dict[str, str]
    product: SubmittedProduct
    mode: PageMode


def get_store(request: Request) -> ProductStore:
    return request.app.state.store


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "")


def _render_form(
    request: Request,
    page: ProductDetailPage,
    errors: FieldErrors = NO_ERRORS,
    status_code: int = status.HTTP_200_OK,
):
    return templates.TemplateResponse(
        request,
        "product.html",
        {
            "product": page.product,
            "mode": page.mode.value,
            "errors": errors,
            "page_title": "Add New Product" if page.mode is PageMode.NEW else "Edit Product",
        },
        status_code=status_code,
    )


router = APIRouter()


@router.get("/")
def index(request: Request, store: ProductStore = Depends(get_store)):
    page = load_product_list(store)
    if _wants_html(request):
        return templates.TemplateResponse(
            request, "index.html", {"products": page.products}
        )
    return ProductListResponse(
        products=[ProductOut.from_summary(product) for product in page.products]
    )


@router.get("/health")
def health(store: ProductStore = Depends(get_store)):
    if not store.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable"},
        )
    return {"status": "ok"}


@router.get("/products/{product_id}")
def product_detail(
    product_id: str, request: Request, store: ProductStore = Depends(get_store)
):
    try:
        page = load_product_detail(store, parse_target(product_id))
    except ProductNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    if _wants_html(request):
        return _render_form(request, page)
    return ProductDetailResponse(product=ProductOut.from_summary(page.product), mode=page.mode)


@router.post("/products/{product_id}")
def submit_product(
    product_id: str,
    request: Request,
    intent: str = Form(SAVE_INTENT),
    title: str = Form(""),
    quantity: str = Form(""),
    store: ProductStore = Depends(get_store),
):
    target = parse_target(product_id)
    submission = Submission.from_form({"intent": intent, "title": title, "quantity": quantity})
    outcome = apply_submission(store, target, submission)

    if outcome.ok:
        return RedirectResponse(url=outcome.redirect_to, status_code=status.HTTP_303_SEE_OTHER)
    if outcome.state is WriteState.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)

    mode = PageMode.NEW if isinstance(target, NewTarget) else PageMode.EDIT
    page = ProductDetailPage(product=outcome.submitted, mode=mode)
    if _wants_html(request):
        return _render_form(request, page, outcome.errors, status_code=outcome.state.status_code)
    body = ValidationFailureResponse(
        errors=outcome.errors.to_dict(),
        product=SubmittedProduct(**page.product.to_dict()),
        mode=mode,
    )
    return JSONResponse(status_code=outcome.state.status_code, content=body.model_dump(mode="json"))


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Build the application; the product store lives for the app's lifespan."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_config = config or AppConfig.from_env()
        configure_logging(app_config.log_level)
        store = ProductStore(app_config.store).open()
        app.state.store = store
        logger.info("Inventory editor started")
        try:
            yield
        finally:
            store.close()
            logger.info("Inventory editor stopped")

    application = FastAPI(title="Inventory Editor", lifespan=lifespan)
    application.include_router(router)
    return application


app = create_app()
