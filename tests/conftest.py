import pytest

from tvfeed.services.feed_fetch_service import feed_cache


SAMPLE_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/" xmlns:atom="http://www.w3.org/2005/Atom">
  <channel>
    <title>YLE TV1</title>
    <atom:link href="http://tvkaista.com/feed/channels/1855486/flv.mediarss" rel="self"/>
    <item>
      <title>Uutiset</title>
      <description>Päivän uutiset</description>
      <link>http://tvkaista.com/search/?findid=8155949</link>
      <source url="http://tvkaista.com/feed/channels/1855486/flv.mediarss">YLE TV1</source>
      <pubDate>Sun, 5 Jan 2020 10:00:00 +0000</pubDate>
      <category><name>news</name></category>
      <media:group>
        <media:content url="http://tvkaista.com/8155949.flv" duration="1800" type="video/x-flv"/>
        <media:thumbnail url="http://tvkaista.com/thumbs/1.jpg" time="00:00:05"/>
        <media:thumbnail url="http://tvkaista.com/thumbs/2.jpg" time="not-a-time"/>
        <media:title>ignored</media:title>
      </media:group>
    </item>
    <item>
      <title>Elokuva</title>
      <atom:link href="http://example.com/?id=99"/>
      <link>http://services.tvkaista.com/feedbeta/seasonpasses/852238</link>
      <source url="http://example.com/nochannel">Unknown</source>
      <pubDate>5 Xyz 2020 10:00:00</pubDate>
      <media:group>
        <media:content duration="abc"/>
        <media:thumbnail url="http://tvkaista.com/thumbs/3.jpg" time="01:15:00"/>
      </media:group>
    </item>
    <item/>
  </channel>
</rss>
""".encode("utf-8")


SECOND_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
  <channel>
    <item>
      <title>Urheilu</title>
      <link>http://tvkaista.com/search/?findid=42</link>
      <source url="http://tvkaista.com/feed/channels/77/flv.mediarss"/>
      <media:group>
        <media:thumbnail url="http://tvkaista.com/thumbs/4.jpg" time="0:1:2"/>
      </media:group>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def sample_feed() -> bytes:
    return SAMPLE_FEED


@pytest.fixture
def second_feed() -> bytes:
    return SECOND_FEED


@pytest.fixture(autouse=True)
def empty_feed_cache():
    feed_cache.clear()
    yield
    feed_cache.clear()
