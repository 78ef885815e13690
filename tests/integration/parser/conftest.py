from collections.abc import Callable
from typing import Any

import pytest

from udon.events import to_records
from udon.parser import StreamingParser

SITE_DOCUMENT = b"""\
; site layout
|html[root].page
  :lang en
  :tags [a "b c" 3 [1/2 2.5]]
  |head
    |title Hello |{em.strong world} again
  !if logged_in
    @[user] greets !{{name}} and !{em loudly}
  !raw:css
    body {
      color: red;
    }

  |p[2].note? :hidden :count 0x1f Text with ```code``` inside\r
  :[base]
'|literal line
|footer :year 2024 :ratio 3/4 :z 1+2i :ok true :none nil
"""


@pytest.fixture(scope="module")
def site_document() -> bytes:
    return SITE_DOCUMENT


@pytest.fixture
def parse_chunks() -> Callable[..., list[dict[str, Any]]]:
    """Feed each chunk in turn and return the resolved records."""

    def _parse(*chunks: bytes) -> list[dict[str, Any]]:
        parser = StreamingParser()
        for chunk in chunks:
            parser.feed(chunk)
        parser.finish()
        return to_records(parser.drain(), parser.arena)

    return _parse
