import pytest

from conftest import MemoryStorage
from storefront.errors import NewsUnavailableError
from storefront.services.news import NewsAssembler, news_image_name

pytestmark = pytest.mark.anyio


def test_news_image_name_strips_all_whitespace():
    assert news_image_name("Neue Pizza  im\tMenü") == "NeuePizzaimMenü.png"


async def test_single_record_is_normalised_to_list(media):
    put, storage = media
    put("News/news.json", {"title": "Sommerfest", "Description": "Am Samstag"})

    news = await NewsAssembler(storage).assemble()

    assert len(news) == 1
    assert news[0].title == "Sommerfest"
    assert news[0].description == "Am Samstag"
    assert news[0].image_url is None


async def test_images_are_joined_by_derived_name(media):
    put, storage = media
    put(
        "News/news.json",
        [
            {"title": "Neue Pizza", "Description": "Jetzt probieren"},
            {"title": "Urlaub", "Description": "Geschlossen"},
        ],
    )
    put("News/newsImages/NeuePizza.png", b"png")
    put("News/newsImages/Urlaub.jpg", b"jpg")

    news = await NewsAssembler(storage).assemble()

    assert news[0].image_url == "/media/News/newsImages/NeuePizza.png"
    assert news[1].image_url is None


async def test_missing_image_folder_is_not_a_failure():
    storage = MemoryStorage({"News/news.json": b'[{"title": "A", "Description": "B"}]'})

    news = await NewsAssembler(storage).assemble()

    assert [n.title for n in news] == ["A"]


async def test_missing_feed_fails():
    with pytest.raises(NewsUnavailableError):
        await NewsAssembler(MemoryStorage()).assemble()


async def test_unparseable_feed_fails():
    storage = MemoryStorage({"News/news.json": b"<html>"})
    with pytest.raises(NewsUnavailableError):
        await NewsAssembler(storage).assemble()
