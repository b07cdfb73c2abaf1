from hostel_allocation.schemas.common.base import (
    BaseSchema,
    FrozenSchema,
    RequestSchema,
    ResponseSchema,
)

__all__ = ["BaseSchema", "FrozenSchema", "RequestSchema", "ResponseSchema"]
