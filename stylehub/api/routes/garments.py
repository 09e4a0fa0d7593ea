"""Partner inventory, styler wardrobe and the paginated suggestion listing."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.api.auth import (
    CurrentUserDependency,
    OptionalUserDependency,
    PartnerDependency,
    StylerDependency,
)
from stylehub.api.deps import get_suggestion_orchestrator
from stylehub.api.schemas import GarmentIn, GarmentOut, GarmentPage, PageMeta
from stylehub.db import models
from stylehub.db.session import get_session
from stylehub.recommender.candidates import (
    CandidateCriteria,
    CandidatePage,
    Pagination,
    parse_sort,
)
from stylehub.services.enums import OwnerKind
from stylehub.services.suggestions import SuggestionOrchestrator
from stylehub.services.wardrobe import WardrobeService

partner_router = APIRouter(prefix="/api/partnerclothes", tags=["partner clothes"])
styler_router = APIRouter(prefix="/api/stylerclothes", tags=["styler clothes"])


class ListingQuery:
    """Query-string filters shared by every garment listing."""

    def __init__(
        self,
        page: str | None = Query(default=None),
        limit: str | None = Query(default=None),
        sort: str | None = Query(default=None),
        search: str | None = Query(default=None),
        color: str | None = Query(default=None),
        category: str | None = Query(default=None),
        min_price: float | None = Query(default=None, alias="minPrice"),
        max_price: float | None = Query(default=None, alias="maxPrice"),
        occasion: str | None = Query(default=None),
    ) -> None:
        self.pagination = Pagination.from_raw(page, limit)
        self.sort = parse_sort(sort)
        self.criteria = CandidateCriteria(
            occasion_types=(occasion,) if occasion else (),
            search=search,
            color=color,
            category=category,
            min_price=min_price,
            max_price=max_price,
        )


def _page(result: CandidatePage) -> GarmentPage:
    return GarmentPage(
        meta=PageMeta(total=result.total, page=result.page, limit=result.limit, pages=result.pages),
        data=[GarmentOut.from_model(garment) for garment in result.items],
    )


@partner_router.get("/suggestions")
async def list_suggestions(
    query: ListingQuery = Depends(),
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
    orchestrator: SuggestionOrchestrator = Depends(get_suggestion_orchestrator),
) -> dict:
    return await orchestrator.list_suggestions(
        session,
        user_id=user.id,
        criteria=query.criteria,
        pagination=query.pagination,
        sort=query.sort,
    )


@partner_router.get("/public", response_model=GarmentPage)
async def list_public_garments(
    query: ListingQuery = Depends(),
    session: AsyncSession = Depends(get_session),
) -> GarmentPage:
    result = await WardrobeService().list_public(
        session,
        criteria=query.criteria,
        pagination=query.pagination,
        sort=query.sort,
    )
    return _page(result)


@partner_router.get("/mine", response_model=GarmentPage)
async def list_partner_garments(
    query: ListingQuery = Depends(),
    user: models.User = PartnerDependency,
    session: AsyncSession = Depends(get_session),
) -> GarmentPage:
    result = await WardrobeService().list_owned(
        session,
        owner=user,
        criteria=query.criteria,
        pagination=query.pagination,
        sort=query.sort,
    )
    return _page(result)


@partner_router.post("", status_code=status.HTTP_201_CREATED)
async def create_partner_garment(
    body: GarmentIn,
    user: models.User = PartnerDependency,
    session: AsyncSession = Depends(get_session),
) -> dict:
    garment = await WardrobeService().create_garment(session, owner=user, values=body.values())
    return {"message": "Cloth created", "cloth": GarmentOut.from_model(garment)}


@partner_router.get("/{garment_id}", response_model=GarmentOut)
async def get_partner_garment(
    garment_id: int,
    user: models.User | None = OptionalUserDependency,
    session: AsyncSession = Depends(get_session),
) -> GarmentOut:
    garment = await WardrobeService().get_garment(
        session,
        garment_id=garment_id,
        viewer=user,
        owner_kind=OwnerKind.PARTNER,
    )
    return GarmentOut.from_model(garment)


@partner_router.put("/{garment_id}")
async def update_partner_garment(
    garment_id: int,
    body: GarmentIn,
    user: models.User = CurrentUserDependency,
    session: AsyncSession = Depends(get_session),
) -> dict:
    garment = await WardrobeService().update_garment(
        session,
        garment_id=garment_id,
        actor=user,
        owner_kind=OwnerKind.PARTNER,
        values=body.values(),
    )
    return {"message": "Cloth updated", "cloth": GarmentOut.from_model(garment)}


@partner_router.delete("/{garment_id}")
async def delete_partner_garment(
    garment_id: int,
    user: models.User = CurrentUserDependency,
    session: AsyncSession = Depends(get_session),
) -> dict:
    await WardrobeService().delete_garment(
        session,
        garment_id=garment_id,
        actor=user,
        owner_kind=OwnerKind.PARTNER,
    )
    return {"message": "Cloth deleted"}


@styler_router.get("", response_model=GarmentPage)
async def list_styler_garments(
    query: ListingQuery = Depends(),
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
) -> GarmentPage:
    result = await WardrobeService().list_owned(
        session,
        owner=user,
        criteria=query.criteria,
        pagination=query.pagination,
        sort=query.sort,
    )
    return _page(result)


@styler_router.post("", status_code=status.HTTP_201_CREATED, response_model=GarmentOut)
async def create_styler_garment(
    body: GarmentIn,
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
) -> GarmentOut:
    garment = await WardrobeService().create_garment(session, owner=user, values=body.values())
    return GarmentOut.from_model(garment)


@styler_router.get("/{garment_id}", response_model=GarmentOut)
async def get_styler_garment(
    garment_id: int,
    user: models.User = CurrentUserDependency,
    session: AsyncSession = Depends(get_session),
) -> GarmentOut:
    garment = await WardrobeService().get_garment(
        session,
        garment_id=garment_id,
        viewer=user,
        owner_kind=OwnerKind.STYLER,
    )
    return GarmentOut.from_model(garment)


@styler_router.put("/{garment_id}", response_model=GarmentOut)
async def update_styler_garment(
    garment_id: int,
    body: GarmentIn,
    user: models.User = CurrentUserDependency,
    session: AsyncSession = Depends(get_session),
) -> GarmentOut:
    garment = await WardrobeService().update_garment(
        session,
        garment_id=garment_id,
        actor=user,
        owner_kind=OwnerKind.STYLER,
        values=body.values(),
    )
    return GarmentOut.from_model(garment)


@styler_router.delete("/{garment_id}")
async def delete_styler_garment(
    garment_id: int,
    user: models.User = CurrentUserDependency,
    session: AsyncSession = Depends(get_session),
) -> dict:
    await WardrobeService().delete_garment(
        session,
        garment_id=garment_id,
        actor=user,
        owner_kind=OwnerKind.STYLER,
    )
    return {"message": "Cloth deleted"}
