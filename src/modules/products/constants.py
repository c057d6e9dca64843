"""Product domain constants.

Reason codes carried by ``InvalidVariantAttributesError`` and the
length limits applied to product input.
"""

from django.db import models


class InvalidAttributeReason(models.TextChoices):
    BLANK_KEY = "BLANK_KEY", "Attribute key must be non-blank text"
    DUPLICATE_KEY = "DUPLICATE_KEY", "Key collides with another key after normalization"
    NULL_VALUE = "NULL_VALUE", "Value cannot be null"
    UNKNOWN_KEY = "UNKNOWN_KEY", "Key not defined in schema"
    INVALID_TYPE = "INVALID_TYPE", "Value not valid for declared type"
    MISSING_REQUIRED = "MISSING_REQUIRED", "Required attribute missing"


PRODUCT_NAME_MAX_LENGTH = 200
PRODUCT_DESCRIPTION_MAX_LENGTH = 5000
PRODUCT_BRAND_ID_MAX_LENGTH = 64
VARIANT_SKU_MAX_LENGTH = 64

INITIAL_VARIANT_VERSION = 1
