"""Tests for the per-element field decoders."""

import io
from datetime import datetime, timedelta, timezone

import pytest

from xmltv_reader.services import field_decoders
from xmltv_reader.services.markup_cursor import MarkupCursor
from xmltv_reader.services.xmltv_types import Icon, Person, Rating, Url, Episode
from xmltv_reader.utils.file_operations import open_document

UTC = timezone.utc


async def cursor_on(markup: str) -> MarkupCursor:
    """Cursor positioned on the start event of the snippet's root element."""
    cursor = MarkupCursor(open_document(io.BytesIO(markup.encode("utf-8"))))
    assert await cursor.read()
    return cursor


class TestTextDecoders:
    @pytest.mark.asyncio
    async def test_localized_text_uses_lang_attribute(self) -> None:
        cursor = await cursor_on('<title lang="de">Tagesschau</title>')
        entry = await field_decoders.read_localized_text(cursor, "en")
        assert entry == field_decoders.LocalizedText("de", "Tagesschau")

    @pytest.mark.asyncio
    async def test_localized_text_falls_back_to_default_language(self) -> None:
        cursor = await cursor_on("<title>News</title>")
        entry = await field_decoders.read_localized_text(cursor, "cn")
        assert entry.language == "cn"
        assert entry.text == "News"

    @pytest.mark.asyncio
    async def test_localized_text_without_content_is_none(self) -> None:
        cursor = await cursor_on('<title lang="en"/>')
        assert await field_decoders.read_localized_text(cursor, "en") is None

    @pytest.mark.asyncio
    async def test_decoder_leaves_cursor_on_element_end(self) -> None:
        cursor = await cursor_on("<category>Sports</category>")
        root = cursor.element
        assert await field_decoders.read_text(cursor) == "Sports"
        assert cursor.is_end_of(root)
        assert await cursor.read() is False

    @pytest.mark.asyncio
    async def test_url_keeps_system(self) -> None:
        cursor = await cursor_on('<url system="imdb">http://imdb.example/tt1</url>')
        assert await field_decoders.read_url(cursor) == Url(value="http://imdb.example/tt1", system="imdb")

    @pytest.mark.asyncio
    async def test_episode_without_system(self) -> None:
        cursor = await cursor_on("<episode-num>S02E05</episode-num>")
        assert await field_decoders.read_episode(cursor) == Episode(value="S02E05", system=None)

    @pytest.mark.asyncio
    async def test_premiere_without_text(self) -> None:
        cursor = await cursor_on('<premiere lang="fr"/>')
        premiere = await field_decoders.read_premiere(cursor)
        assert premiere == field_decoders.Premiere("fr", None)


class TestIconDecoder:
    @pytest.mark.asyncio
    async def test_reads_dimensions(self) -> None:
        cursor = await cursor_on('<icon src="logo.png" height="40" width="80"/>')
        assert await field_decoders.read_icon(cursor) == Icon(source="logo.png", height=40, width=80)

    @pytest.mark.asyncio
    async def test_non_integer_dimensions_are_absent(self) -> None:
        cursor = await cursor_on('<icon src="logo.png" height="40px" width="wide"/>')
        assert await field_decoders.read_icon(cursor) == Icon(source="logo.png")

    @pytest.mark.parametrize("markup", ['<icon height="40"/>', '<icon src=" "/>'])
    @pytest.mark.asyncio
    async def test_icon_without_source_is_dropped(self, markup) -> None:
        cursor = await cursor_on(markup)
        assert await field_decoders.read_icon(cursor) is None


class TestDateDecoders:
    @pytest.mark.asyncio
    async def test_air_date_full(self) -> None:
        cursor = await cursor_on("<date>20220522</date>")
        assert await field_decoders.read_air_date(cursor, UTC) == datetime(2022, 5, 22, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_air_date_year_only(self) -> None:
        cursor = await cursor_on("<date>1999</date>")
        assert await field_decoders.read_air_date(cursor, UTC) == datetime(1999, 1, 1, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_air_date_in_target_timezone(self) -> None:
        target = timezone(timedelta(hours=-5))
        cursor = await cursor_on("<date>20220522</date>")
        value = await field_decoders.read_air_date(cursor, target)
        assert value.utcoffset() == timedelta(hours=-5)
        assert value == datetime(2022, 5, 22, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_unparsable_air_date_is_none(self) -> None:
        cursor = await cursor_on("<date>last summer</date>")
        assert await field_decoders.read_air_date(cursor, UTC) is None

    @pytest.mark.asyncio
    async def test_previously_shown_attributes(self) -> None:
        cursor = await cursor_on('<previously-shown channel="bbc1" start="20220521120000 +0100"/>')
        shown = await field_decoders.read_previously_shown(cursor, UTC)
        assert shown.channel == "bbc1"
        assert shown.start == datetime(2022, 5, 21, 11, 0, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_previously_shown_without_attributes(self) -> None:
        cursor = await cursor_on("<previously-shown/>")
        assert await field_decoders.read_previously_shown(cursor, UTC) == field_decoders.PreviouslyShown(None, None)


class TestBlockDecoders:
    @pytest.mark.asyncio
    async def test_star_rating_ignores_its_icons(self) -> None:
        cursor = await cursor_on('<star-rating><value>7/10</value><icon src="s.png"/></star-rating>')
        root = cursor.element
        assert await field_decoders.read_star_rating(cursor) == "7/10"
        assert cursor.is_end_of(root)

    @pytest.mark.asyncio
    async def test_star_rating_without_value(self) -> None:
        cursor = await cursor_on("<star-rating/>")
        assert await field_decoders.read_star_rating(cursor) is None

    @pytest.mark.asyncio
    async def test_rating_collects_value_and_icons(self) -> None:
        cursor = await cursor_on(
            '<rating system="BBFC"><value>15</value><icon src="15.png" width="20"/><icon/></rating>'
        )
        entry = await field_decoders.read_rating(cursor)
        assert entry.system == "BBFC"
        assert entry.rating == Rating(value="15", icons=[Icon(source="15.png", width=20)])

    @pytest.mark.asyncio
    async def test_rating_without_system_uses_empty_key(self) -> None:
        cursor = await cursor_on("<rating><value>PG</value></rating>")
        entry = await field_decoders.read_rating(cursor)
        assert entry.system == ""
        assert entry.rating.value == "PG"

    @pytest.mark.asyncio
    async def test_credits_keep_document_order(self) -> None:
        cursor = await cursor_on(
            "<credits>"
            "<director>D1</director><director>D2</director>"
            '<actor role="Villain">A1</actor><actor>A2</actor>'
            "<presenter>P1</presenter><guest>G1</guest><director></director>"
            "</credits>"
        )
        root = cursor.element
        credits = await field_decoders.read_credits(cursor)

        assert credits.directors == ["D1", "D2"]
        assert credits.actors == [Person(name="A1", role="Villain"), Person(name="A2")]
        assert credits.presenters == ["P1"]
        assert credits.guests == [Person(name="G1", role=None)]
        assert credits.writers == []
        assert cursor.is_end_of(root)

    @pytest.mark.asyncio
    async def test_empty_credits(self) -> None:
        cursor = await cursor_on("<credits/>")
        credits = await field_decoders.read_credits(cursor)
        assert credits.directors == []
        assert credits.actors == []
