from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class DesignPreferences(BaseModel):
    colors: List[str] = []
    materials: List[str] = []
    brands: List[str] = []
    constraints: List[str] = []


class DesignProfileRequest(BaseModel):
    style: str
    budget: Optional[float] = Field(default=None, ge=0)
    preferences: Optional[DesignPreferences] = None


class BudgetGuidelines(BaseModel):
    total: float
    perCategory: Dict[str, float]


class DesignProfile(BaseModel):
    style: str
    colorPalette: List[str]
    materialProfile: List[str]
    designPrinciples: List[str]
    brandAffinity: List[str]
    moodKeywords: List[str]
    constraints: List[str] = []
    budgetGuidelines: Optional[BudgetGuidelines] = None


class SelectedProduct(BaseModel):
    productId: str
    name: str
    category: Optional[str] = None
    price: float = Field(ge=0)
    quantity: int = Field(default=1, ge=1)


class ProductListRequest(BaseModel):
    products: List[SelectedProduct]


class ProductLine(BaseModel):
    productId: str
    name: str
    category: str
    price: float
    quantity: int
    subtotal: float


class ProductList(BaseModel):
    products: List[ProductLine]
    totalCost: float
    costBreakdown: Dict[str, float]
    itemCount: int
    averageItemCost: float
    taxEstimate: float
    finalTotal: float
