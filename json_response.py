from typing import override

import orjson
from fastapi.responses import JSONResponse


class JSONResponseUTF8(JSONResponse):
    media_type = 'application/json; charset=utf-8'

    @override
    def render(self, content) -> bytes:
        return orjson.dumps(content, option=orjson.OPT_NON_STR_KEYS)
