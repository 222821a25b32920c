from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from jewelry_storefront.models.cart import Cart, CartLine


class CartLineSchema(Schema):
    """One cart line as stored in the session cookie"""

    class Meta:
        unknown = EXCLUDE

    product_id = fields.Int(required=True, strict=True)
    name = fields.Str(required=True)
    unit_price_cents = fields.Int(required=True, strict=True, validate=validate.Range(min=0))
    quantity = fields.Int(required=True, strict=True, validate=validate.Range(min=1))
    is_wholesale = fields.Bool(load_default=False)
    sku = fields.Str(allow_none=True, load_default=None)
    image_url = fields.Str(allow_none=True, load_default=None)
    description = fields.Str(load_default="")
    category_name = fields.Str(allow_none=True, load_default=None)

    @post_load
    def make_line(self, data, **kwargs):
        return CartLine(**data)


class CartSnapshotSchema(Schema):
    """The whole cart; a malformed snapshot loads as an empty cart upstream"""

    class Meta:
        unknown = EXCLUDE

    lines = fields.List(fields.Nested(CartLineSchema), load_default=list)

    @post_load
    def make_cart(self, data, **kwargs):
        return Cart(lines=data["lines"])
