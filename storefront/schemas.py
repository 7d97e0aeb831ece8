from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.permissions import Permission, to_names

PermissionName = str


# --- Permissions ---

class PermissionsUpdate(BaseModel):
    permissions: list[PermissionName]

    @field_validator("permissions")
    @classmethod
    def _known_names(cls, names: list[str]) -> list[str]:
        unknown = [n for n in names if n not in Permission.__members__]
        if unknown:
            raise ValueError(f"Unknown permission(s): {', '.join(unknown)}")
        # Preserve order, drop repeats.
        return list(dict.fromkeys(names))


# --- Auth ---

# bcrypt only looks at the first 72 bytes and refuses anything longer.
BCRYPT_MAX_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes in UTF-8")
    return value


class SignupRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    name: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1, max_length=72)

    @field_validator("password")
    @classmethod
    def _password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class SigninRequest(BaseModel):
    email: str = Field(max_length=255)
    password: str = Field(max_length=72)


class RequestResetRequest(BaseModel):
    email: str = Field(max_length=255)


class ResetPasswordRequest(BaseModel):
    reset_token: str = Field(alias="resetToken")
    password: str = Field(min_length=1, max_length=72)
    confirm_password: str = Field(alias="confirmPassword", max_length=72)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("password")
    @classmethod
    def _password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class SuccessMessage(BaseModel):
    message: str


# --- User ---

class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    permissions: list[PermissionName]
    created_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)

    @field_validator("permissions", mode="before")
    @classmethod
    def _flags_to_names(cls, value):
        if isinstance(value, (int, Permission)):
            return to_names(value)
        return value


# --- Item ---

class ItemBase(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    description: str = ""
    price: int = Field(0, ge=0)
    image: str | None = Field(None, max_length=500)
    large_image: str | None = Field(None, max_length=500)


class ItemCreate(ItemBase):
    pass


class ItemUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=300)
    description: str | None = None
    price: int | None = Field(None, ge=0)
    image: str | None = Field(None, max_length=500)
    large_image: str | None = Field(None, max_length=500)

    @field_validator("title", "description", "price")
    @classmethod
    def _not_null(cls, value):
        # Only the image columns are nullable; these may be omitted but not cleared.
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class ItemResponse(ItemBase):
    id: int
    user_id: int
    created_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class Aggregate(BaseModel):
    count: int


class ItemsConnection(BaseModel):
    aggregate: Aggregate


# --- Cart ---

class CartItemResponse(BaseModel):
    id: int
    quantity: int
    item_id: int
    user_id: int
    item: ItemResponse | None = None
    model_config = ConfigDict(from_attributes=True)


class MeResponse(UserResponse):
    cart: list[CartItemResponse] = []


# --- Metrics ---

class MetricsResponse(BaseModel):
    total_items: int
    total_users: int
    total_cart_items: int
    cache_info: dict = {}
