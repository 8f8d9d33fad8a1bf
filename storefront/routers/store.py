from fastapi import APIRouter, Request

from storefront.schemas.store import StoreProfile

router = APIRouter()


@router.get("", response_model=StoreProfile)
async def get_store(request: Request) -> StoreProfile:
    return request.app.state.store_profile
