from storefront.models.discount_code import (
    DiscountCode,
    DiscountCodeProductLink,
    DiscountCodeType,
)
from storefront.models.product import Product
from storefront.models.user import User
from storefront.models.order import Order
from storefront.models.download_verification import DownloadVerification

# add ALL models here
