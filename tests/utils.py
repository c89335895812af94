from __future__ import annotations

from restxml.params import Param
from restxml.requests import BaseRequest
from restxml.responses import BaseResponse

FLICKR_ENDPOINT = "http://api.flickr.com/services/rest/"

PHOTOS_XML = '<photos stat="ok"><photo id="1" title="A"/><photo id="2" title="B"/></photos>'

FLICKR_SEARCH_XML = """<?xml version="1.0" encoding="utf-8" ?>
<rsp stat="ok">
  <photos page="1" pages="12" perpage="2" total="23">
    <photo id="2636" owner="47058503995@N01" title="test_04" ispublic="1" />
    <photo id="2635" owner="47058503995@N01" title="test_03" ispublic="0" />
  </photos>
</rsp>
"""

FLICKR_ERROR_XML = """<?xml version="1.0" encoding="utf-8" ?>
<rsp stat="fail">
  <err code="100" msg="Invalid API Key (Key has invalid format)" />
</rsp>
"""


class FakeTransport:
    """Transport that records the calls, and returns a fixed response."""

    def __init__(self, body: str | bytes, status_code: int = 200):
        self.body = body
        self.status_code = status_code
        self.calls = []

    def perform(self, method: str, url: str):
        self.calls.append((method, url))
        return self.status_code, self.body


class FlickrRequest(BaseRequest):
    method = Param()
    api_key = Param()


class PhotoSearch(FlickrRequest):
    tags = Param()
    per_page = Param(type=int)


class Photo(BaseResponse):
    id = Param(type=int, source="attribute")
    title = Param(source="attribute")


class PhotoList(BaseResponse):
    stat = Param(source="attribute", required=True)
    photos = Param(path="photo", collection_of=Photo)


class FlickrPhoto(Photo):
    owner = Param(source="attribute")
    ispublic = Param(type=bool, source="attribute")


class FlickrError(BaseResponse):
    code = Param(type=int, source="attribute")
    msg = Param(source="attribute")


class FlickrResponse(BaseResponse):
    stat = Param(source="attribute", required=True)
    error = Param(path="err", node_of=FlickrError)

    def is_successful(self):
        return self.stat == "ok"


class FlickrSearchResponse(FlickrResponse):
    page = Param(type=int, path="photos/page", source="attribute")
    total = Param(type=int, path="photos/@total", source="attribute")
    photos = Param(path="photos/photo", collection_of=FlickrPhoto)
