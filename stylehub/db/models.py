"""SQLAlchemy models describing the core domain tables."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from stylehub.services.enums import OwnerKind, Visibility


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for ORM models."""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )


class User(Base):
    """Account of a styler, partner or admin."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(254), unique=True, index=True)
    role: Mapped[str] = mapped_column(String(16), index=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False)

    styler: Mapped[Styler | None] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    partner: Mapped[Partner | None] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class Styler(Base):
    """Styler profile sharing its primary key with the owning user."""

    __tablename__ = "stylers"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), primary_key=True)
    name: Mapped[str] = mapped_column(String(128))
    gender: Mapped[str] = mapped_column(String(16), default="other")
    # free-form: detected tones may fall outside SkinTone
    skin_tone: Mapped[str | None] = mapped_column(String(32))
    country: Mapped[str | None] = mapped_column(String(64))
    bio: Mapped[str | None] = mapped_column(Text)

    user: Mapped[User] = relationship(back_populates="styler")


class Partner(Base):
    """Clothing vendor listing garments for stylers."""

    __tablename__ = "partners"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), primary_key=True)
    name: Mapped[str] = mapped_column(String(128))
    email: Mapped[str | None] = mapped_column(String(254))
    phone: Mapped[str | None] = mapped_column(String(32))
    location: Mapped[str | None] = mapped_column(String(256))

    user: Mapped[User] = relationship(back_populates="partner")


class Garment(Base):
    """Clothing item owned by a styler or listed by a partner."""

    __tablename__ = "garments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_kind: Mapped[str] = mapped_column(String(16), default=OwnerKind.STYLER.value, index=True)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    name: Mapped[str] = mapped_column(String(128))
    brand: Mapped[str | None] = mapped_column(String(128))
    image: Mapped[str | None] = mapped_column(String(512))
    color: Mapped[str] = mapped_column(String(64))
    category: Mapped[str] = mapped_column(String(64), index=True)
    gender: Mapped[str | None] = mapped_column(String(16))
    price: Mapped[float] = mapped_column(Float, default=0.0)
    stock: Mapped[int] = mapped_column(Integer, default=0)
    description: Mapped[str] = mapped_column(Text, default="")
    visibility: Mapped[str] = mapped_column(String(16), default=Visibility.PRIVATE.value, index=True)
    usage_count: Mapped[int] = mapped_column(Integer, default=0)

    occasion_tags: Mapped[list["GarmentOccasion"]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="GarmentOccasion.id",
    )
    skin_tone_tags: Mapped[list["GarmentSkinTone"]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="GarmentSkinTone.id",
    )

    @property
    def occasions(self) -> list[str]:
        return [tag.value for tag in self.occasion_tags]

    @property
    def suitable_skin_tones(self) -> list[str]:
        return [tag.value for tag in self.skin_tone_tags]


class GarmentOccasion(Base):
    __tablename__ = "garment_occasions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    garment_id: Mapped[int] = mapped_column(ForeignKey("garments.id", ondelete="CASCADE"), index=True)
    value: Mapped[str] = mapped_column(String(32), index=True)


class GarmentSkinTone(Base):
    """Skin tone a garment suits; no rows means it suits every tone."""

    __tablename__ = "garment_skin_tones"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    garment_id: Mapped[int] = mapped_column(ForeignKey("garments.id", ondelete="CASCADE"), index=True)
    value: Mapped[str] = mapped_column(String(32), index=True)


class Occasion(Base):
    """Planned event for which a styler assembles an outfit."""

    __tablename__ = "occasions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    title: Mapped[str] = mapped_column(String(256))
    type: Mapped[str] = mapped_column(String(32), default="other", index=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    location: Mapped[str | None] = mapped_column(String(256))
    dress_code: Mapped[str | None] = mapped_column(String(128))
    notes: Mapped[str | None] = mapped_column(Text)
    skin_tone: Mapped[str | None] = mapped_column(String(32))

    garment_links: Mapped[list["OccasionGarment"]] = relationship(
        back_populates="occasion",
        cascade="all, delete-orphan",
        order_by="OccasionGarment.position",
        lazy="selectin",
    )

    @property
    def garments(self) -> list[Garment]:
        return [link.garment for link in self.garment_links if link.garment is not None]


class OccasionGarment(Base):
    """Ordered association between an occasion and a styler garment."""

    __tablename__ = "occasion_garments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    occasion_id: Mapped[int] = mapped_column(ForeignKey("occasions.id", ondelete="CASCADE"), index=True)
    garment_id: Mapped[int] = mapped_column(ForeignKey("garments.id"), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)

    occasion: Mapped[Occasion] = relationship(back_populates="garment_links")
    garment: Mapped[Garment | None] = relationship(lazy="selectin")


class WearEvent(Base):
    """Immutable record that a garment was worn."""

    __tablename__ = "wear_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # not a foreign key: events outlive deleted garments
    garment_id: Mapped[int] = mapped_column(Integer, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    worn_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    color: Mapped[str] = mapped_column(String(64))
    category: Mapped[str] = mapped_column(String(64))


class AdminBootstrap(Base):
    """Singleton row recording which user claimed the first admin slot."""

    __tablename__ = "admin_bootstrap"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    claimed_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
