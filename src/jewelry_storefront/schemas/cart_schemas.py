from pydantic import BaseModel, Field


class AddToCartRequest(BaseModel):
    """Request to add a product to the cart"""
    product_id: int = Field(gt=0, description="Product identifier")
    quantity: int = Field(default=1, description="Units to add")


class UpdateCartLineRequest(BaseModel):
    """Request to change a line's quantity; 0 removes the line"""
    quantity: int = Field(ge=0, description="New quantity (0 to remove)")
