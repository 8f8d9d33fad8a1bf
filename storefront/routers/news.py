from fastapi import APIRouter, HTTPException, Request, status

from storefront.schemas.news import NewsItem

router = APIRouter()


@router.get("", response_model=list[NewsItem])
async def list_news(request: Request) -> list[NewsItem]:
    news = getattr(request.app.state, "news", None)
    if news is None:
        detail = getattr(request.app.state, "news_error", None) or "News are not loaded yet"
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
    return news
