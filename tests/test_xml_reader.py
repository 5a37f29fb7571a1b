import io

from tvfeed.utils.xml_reader import FeedEventReader


DOCUMENT = (
    b'<rss xmlns:media="http://search.yahoo.com/mrss/">'
    b'<channel>'
    b'<media:group kind="video"><media:content duration="5"/></media:group>'
    b'<title>Hi <b>there</b>!</title>'
    b'</channel>'
    b'</rss>'
)


def test_walks_elements_and_reports_names():
    reader = FeedEventReader(io.BytesIO(DOCUMENT))

    assert reader.read_next_start_element()
    assert reader.name == "rss"
    assert reader.read_next_start_element()
    assert reader.name == "channel"
    assert reader.qualified_name == "channel"

    assert reader.read_next_start_element()
    assert reader.name == "group"
    assert reader.qualified_name == "media:group"
    assert reader.attribute("kind") == "video"
    assert reader.attribute("missing") == ""
    assert reader.attribute("missing", "fallback") == "fallback"
    reader.skip_current_element()

    assert reader.read_next_start_element()
    assert reader.name == "title"
    assert reader.read_element_text() == "Hi there!"

    assert not reader.read_next_start_element()  # </channel>
    assert not reader.read_next_start_element()  # </rss>
    assert not reader.read_next_start_element()  # end of document
    assert reader.error is None


def test_small_chunks_and_text_streams():
    reader = FeedEventReader(io.StringIO(DOCUMENT.decode("utf-8")), chunk_size=3)

    names = []
    assert reader.read_next_start_element()
    assert reader.read_next_start_element()
    while reader.read_next_start_element():
        names.append(reader.qualified_name)
        reader.skip_current_element()

    assert names == ["media:group", "title"]
    assert reader.error is None


def test_empty_stream_has_no_start_element():
    reader = FeedEventReader(io.BytesIO(b""))

    assert not reader.read_next_start_element()
    assert reader.error
    assert reader.name == ""


def test_syntax_error_ends_event_stream_without_raising():
    reader = FeedEventReader(io.BytesIO(b"<rss><channel></rss>"))

    for _ in range(5):
        reader.read_next_start_element()

    assert reader.error
    assert not reader.read_next_start_element()


def test_entities_are_not_expanded_from_external_files():
    document = (
        b'<?xml version="1.0"?>'
        b'<!DOCTYPE rss [<!ENTITY secret SYSTEM "file:///etc/passwd">]>'
        b'<rss><title>&secret;</title></rss>'
    )
    reader = FeedEventReader(io.BytesIO(document))

    assert reader.read_next_start_element()
    assert reader.read_next_start_element()
    assert "root:" not in reader.read_element_text()
