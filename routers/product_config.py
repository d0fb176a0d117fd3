"""
Product Configuration Router
Stateless previews over a posted product snapshot: pricing, packs, stock and
the payload to submit to the catalog.
"""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any, Literal
import logging

from schemas.product_schemas import ProductDraft
from services.catalog_payload import build_submission_payload, draft_from_catalog
from services.product_session import ProductEditSession, build_preview
from services.variant_matrix import VariantMatrix

logger = logging.getLogger(__name__)
router = APIRouter()


class VolumeTierModel(BaseModel):
    minQuantity: int = Field(1, ge=0)
    maxQuantity: Optional[int] = Field(None, ge=0)
    price: float = Field(0, ge=0)
    compareAtPrice: Optional[float] = Field(None, ge=0)
    label: Optional[Literal["most_popular", "best_seller", "super_saver"]] = None


class OptionAxisModel(BaseModel):
    name: str
    values: List[str] = []


class VariantModel(BaseModel):
    optionValues: List[str]
    sku: Optional[str] = None
    price: float = Field(0, ge=0)
    compareAtPrice: Optional[float] = Field(None, ge=0)
    label: Optional[Literal["most_popular"]] = None
    volumeTiers: List[VolumeTierModel] = []
    stockQuantity: Optional[int] = None
    lowStockThreshold: Optional[int] = None
    allowBackorder: Optional[bool] = None


class BundleItemModel(BaseModel):
    productId: str
    quantity: int = Field(1, ge=1)
    priceOverride: Optional[float] = Field(None, ge=0)
    productName: Optional[str] = None


class ProductSnapshot(BaseModel):
    """Catalog product; unknown catalog fields are passed through."""
    model_config = ConfigDict(extra="allow")

    productType: Literal["simple", "variable", "bundle"] = "simple"
    price: float = Field(0, ge=0)
    compareAtPrice: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    options: List[OptionAxisModel] = []
    variants: List[VariantModel] = []
    volumeTiers: List[VolumeTierModel] = []
    bundleItems: List[BundleItemModel] = []
    bundlePricing: Optional[Literal["fixed", "sum", "discounted"]] = None
    bundlePrice: Optional[float] = Field(None, ge=0)
    bundleDiscountPercent: Optional[float] = Field(None, ge=0, le=100)
    trackInventory: bool = True
    stockQuantity: int = 0
    lowStockThreshold: Optional[int] = None
    allowBackorder: bool = False


class PreviewRequest(BaseModel):
    product: ProductSnapshot
    variantIndex: Optional[int] = None
    packIndex: Optional[int] = None
    quantity: int = Field(1, ge=1)
    productPrices: Dict[str, float] = {}


class SubmissionRequest(BaseModel):
    product: ProductSnapshot
    productPrices: Dict[str, float] = {}
    slugManuallyEdited: bool = False


class RemovalImpactRequest(BaseModel):
    product: ProductSnapshot
    axisIndex: int
    valueIndex: int


def _snapshot_dict(product: ProductSnapshot) -> Dict[str, Any]:
    return product.model_dump(exclude_none=True)


def _seed_draft(product: ProductSnapshot) -> ProductDraft:
    """Seed a draft, rejecting variants that do not match the option axes."""
    draft = draft_from_catalog(_snapshot_dict(product))
    if not VariantMatrix(draft.options, draft.variants).is_consistent():
        logger.warning(
            f"Rejected snapshot: {len(draft.variants)} variant(s) inconsistent "
            f"with {len(draft.options)} option axis/axes"
        )
        raise HTTPException(status_code=422, detail="Variants do not match the product options")
    return draft


@router.post("/product-config/preview")
async def preview_product(request: PreviewRequest):
    """Canonical price, display label, selection line and stock for a snapshot"""
    try:
        config = _seed_draft(request.product).narrow()
        return build_preview(
            config,
            variant_index=request.variantIndex,
            pack_index=request.packIndex,
            quantity=request.quantity,
            price_lookup=request.productPrices,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Preview product error: {e}")
        raise HTTPException(status_code=500, detail="Failed to preview product")


@router.post("/product-config/submission")
async def submission_payload(request: SubmissionRequest):
    """Payload to send to the catalog on submit"""
    try:
        draft = _seed_draft(request.product)
        return build_submission_payload(
            draft,
            price_lookup=request.productPrices,
            slug_manually_edited=request.slugManuallyEdited,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Build submission error: {e}")
        raise HTTPException(status_code=500, detail="Failed to build submission payload")


@router.post("/product-config/removal-impact")
async def removal_impact(request: RemovalImpactRequest):
    """How many variants removing an option value would delete"""
    session = ProductEditSession(_seed_draft(request.product))
    impact = session.request_value_removal(request.axisIndex, request.valueIndex)
    if impact is None:
        raise HTTPException(status_code=404, detail="Option value not found")
    return impact.to_dict()
