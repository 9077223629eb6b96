"""Shared fixtures: sample feed documents and posts."""

import pendulum
import pytest

from feedplanet.models import Post

RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:dc="http://purl.org/dc/elements/1.1/"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Example Blog</title>
    <link>http://example.com/</link>
    <item>
      <title>First</title>
      <guid>http://example.com/1</guid>
      <link>http://example.com/1</link>
      <dc:creator>Alice</dc:creator>
      <pubDate>Fri, 01 Mar 2024 10:00:00 +0000</pubDate>
      <category>python</category>
      <category>feeds</category>
      <category>python</category>
      <description>Short</description>
      <content:encoded><![CDATA[<p>Long</p>]]></content:encoded>
    </item>
    <item>
      <title>Second</title>
      <guid>http://example.com/2</guid>
      <link>http://example.com/2</link>
      <pubDate>Sat, 02 Mar 2024 10:00:00 GMT</pubDate>
      <description>Only a summary</description>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Blog</title>
  <author><name>Feed Author</name></author>
  <entry><id>u1</id><title>Hello</title><published>2024-03-01T10:00:00Z</published><link rel="alternate" href="http://x/1"/></entry>
  <entry>
    <id>u2</id>
    <title>Second</title>
    <author><name>Bob</name></author>
    <published>2024-03-02T10:00:00+02:00</published>
    <updated>2024-03-02T11:00:00.250Z</updated>
    <link rel="self" href="http://x/self"/>
    <link rel="alternate" href="http://x/real"/>
    <category term="a"/>
    <category term="b"/>
    <content type="html">Body</content>
    <summary>Sum</summary>
  </entry>
</feed>
"""


@pytest.fixture
def rss_feed() -> bytes:
    return RSS_FEED


@pytest.fixture
def atom_feed() -> bytes:
    return ATOM_FEED


@pytest.fixture
def now():
    return pendulum.datetime(2024, 3, 5, 12, 0, 0)


def make_post(post_id: str = "p1", **overrides) -> Post:
    values = {
        "id": post_id,
        "feed_name": "example",
        "feed_title": "Example Blog",
        "title": f"Post {post_id}",
        "link": f"http://example.com/{post_id}",
        "published_at": pendulum.datetime(2024, 3, 1, 10, 0, 0),
        "tags": [],
    }
    values.update(overrides)
    return Post(**values)
