"""Request and response bodies exchanged with HTTP clients."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from stylehub.db import models
from stylehub.services.admin_analytics import UNSPECIFIED_LOCATION, PartnerInventory


class CamelModel(BaseModel):
    """Accepts and renders camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    email: str
    role: str
    full_name: str | None = None
    gender: str | None = None
    skin_tone: str | None = None
    country: str | None = None
    phone: str | None = None
    address: str | None = None


class StylerProfileUpdate(CamelModel):
    name: str | None = None
    gender: str | None = None
    skin_tone: str | None = None
    country: str | None = None
    bio: str | None = None


class UserOut(CamelModel):
    id: int
    email: str
    role: str
    is_approved: bool

    @classmethod
    def from_model(cls, user: models.User) -> "UserOut":
        return cls(id=user.id, email=user.email, role=user.role, is_approved=user.is_approved)


class ProfileOut(CamelModel):
    """The caller's account merged with its styler or partner record."""

    id: int
    email: str
    role: str
    is_approved: bool
    name: str | None = None
    gender: str | None = None
    skin_tone: str | None = None
    country: str | None = None
    bio: str | None = None
    phone: str | None = None
    location: str | None = None

    @classmethod
    def from_model(cls, user: models.User) -> "ProfileOut":
        profile = cls(id=user.id, email=user.email, role=user.role, is_approved=user.is_approved)
        if user.styler is not None:
            for name in ("name", "gender", "skin_tone", "country", "bio"):
                setattr(profile, name, getattr(user.styler, name))
        elif user.partner is not None:
            for name in ("name", "phone", "location"):
                setattr(profile, name, getattr(user.partner, name))
        return profile


class StylerOut(CamelModel):
    id: int
    name: str
    gender: str
    skin_tone: str | None = None
    country: str | None = None
    bio: str | None = None

    @classmethod
    def from_model(cls, styler: models.Styler) -> "StylerOut":
        return cls(
            id=styler.user_id,
            name=styler.name,
            gender=styler.gender,
            skin_tone=styler.skin_tone,
            country=styler.country,
            bio=styler.bio,
        )


class GarmentIn(CamelModel):
    name: str | None = None
    brand: str | None = None
    image: str | None = None
    color: str | None = None
    category: str | None = None
    gender: str | None = None
    price: float | None = None
    stock: int | None = None
    description: str | None = None
    occasion: list[str] | None = None
    suitable_skin_tones: list[str] | None = None
    visibility: str | None = None

    def values(self) -> dict[str, Any]:
        """Only the fields the client actually sent."""

        return self.model_dump(exclude_unset=True)


class GarmentOut(CamelModel):
    id: int
    owner_id: int
    owner_type: str
    name: str
    brand: str | None = None
    image: str | None = None
    color: str
    category: str
    gender: str | None = None
    price: float
    stock: int
    description: str
    occasion: list[str]
    suitable_skin_tones: list[str]
    visibility: str
    usage_count: int
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, garment: models.Garment) -> "GarmentOut":
        return cls(
            id=garment.id,
            owner_id=garment.owner_id,
            owner_type=garment.owner_kind,
            name=garment.name,
            brand=garment.brand,
            image=garment.image,
            color=garment.color,
            category=garment.category,
            gender=garment.gender,
            price=garment.price,
            stock=garment.stock,
            description=garment.description,
            occasion=garment.occasions,
            suitable_skin_tones=garment.suitable_skin_tones,
            visibility=garment.visibility,
            usage_count=garment.usage_count,
            created_at=garment.created_at,
        )


class PageMeta(CamelModel):
    total: int
    page: int
    limit: int
    pages: int


class GarmentPage(CamelModel):
    meta: PageMeta
    data: list[GarmentOut]


class OccasionIn(CamelModel):
    title: str | None = None
    type: str | None = None
    date: datetime | None = None
    location: str | None = None
    dress_code: str | None = None
    notes: str | None = None
    skin_tone: str | None = None
    clothes_list: list[int] | None = None

    def values(self) -> dict[str, Any]:
        values = self.model_dump(exclude_unset=True)
        if "clothes_list" in values:
            values["garment_ids"] = values.pop("clothes_list")
        return values


class OccasionOut(CamelModel):
    id: int
    title: str
    type: str
    date: datetime
    location: str | None = None
    dress_code: str | None = None
    notes: str | None = None
    skin_tone: str | None = None
    clothes_list: list[GarmentOut]
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, occasion: models.Occasion) -> "OccasionOut":
        return cls(
            id=occasion.id,
            title=occasion.title,
            type=occasion.type,
            date=occasion.date,
            location=occasion.location,
            dress_code=occasion.dress_code,
            notes=occasion.notes,
            skin_tone=occasion.skin_tone,
            clothes_list=[GarmentOut.from_model(garment) for garment in occasion.garments],
            created_at=occasion.created_at,
        )


class WearIn(CamelModel):
    dress_id: int | None = None
    color: str | None = None
    category: str | None = None
    date: datetime | None = None


class WearEventOut(CamelModel):
    id: int
    dress_id: int
    user_id: int
    worn_at: datetime
    color: str
    category: str

    @classmethod
    def from_model(cls, event: models.WearEvent) -> "WearEventOut":
        return cls(
            id=event.id,
            dress_id=event.garment_id,
            user_id=event.user_id,
            worn_at=event.worn_at,
            color=event.color,
            category=event.category,
        )


class ColorAdviceIn(CamelModel):
    skin_tone: str | None = None


class SkinToneIn(CamelModel):
    image_url: str | None = None
    save_to_profile: bool = False


class PartnerInventoryOut(CamelModel):
    id: int
    name: str
    email: str | None = None
    phone: str | None = None
    location: str
    is_approved: bool
    created_at: datetime | None = None
    total_clothes: int
    clothes: list[GarmentOut]

    @classmethod
    def from_inventory(cls, inventory: PartnerInventory) -> "PartnerInventoryOut":
        partner = inventory.partner
        return cls(
            id=partner.user_id,
            name=partner.name,
            email=partner.email,
            phone=partner.phone,
            location=partner.location or UNSPECIFIED_LOCATION,
            is_approved=inventory.is_approved,
            created_at=partner.created_at,
            total_clothes=len(inventory.garments),
            clothes=[GarmentOut.from_model(garment) for garment in inventory.garments],
        )
