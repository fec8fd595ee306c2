#storefront/api/routers/products.py
from fastapi import APIRouter, Depends, Path, Query

from storefront.api.dependencies import get_product_service
from storefront.api.errors import ERROR_RESPONSES
from storefront.domain.schemas import MAX_ID, Envelope, ProductCreate, ProductOut, ProductStockOut
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"], responses=ERROR_RESPONSES)


@router.post("/", response_model=Envelope[ProductOut], status_code=201)
def create_product(payload: ProductCreate, svc: ProductService = Depends(get_product_service)):
    return {"success": True, "message": "Product created.", "data": svc.create_product(payload)}


@router.get("/{product_id}", response_model=Envelope[ProductOut])
def get_product(
    product_id: int = Path(..., gt=0, le=MAX_ID),
    svc: ProductService = Depends(get_product_service),
):
    return {"success": True, "message": "Product retrieved.", "data": svc.get_product(product_id)}


@router.get("/{product_id}/stock", response_model=Envelope[ProductStockOut])
def get_product_stock(
    product_id: int = Path(..., gt=0, le=MAX_ID),
    user_id: int | None = Query(None, gt=0, le=MAX_ID),
    svc: ProductService = Depends(get_product_service),
):
    """
    Laczny zapas wszystkich wersji jezykowych.
    Z user_id: dostepna ilosc pomniejszona o to, co uzytkownik ma juz w koszyku.
    """
    return {
        "success": True,
        "message": "Product stock retrieved successfully.",
        "data": svc.get_stock_view(product_id, user_id=user_id),
    }
