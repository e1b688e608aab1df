from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


class BizResponse(JSONResponse):
    """
    统一的接口返回结构：
        {"code": 0, "msg": "ok", "data": ...}
    - code: 0 表示成功，否则等于 HTTP 状态码
    - data 可以直接传 pydantic 模型 / dict / list
    """

    def __init__(self, data: Any = None, msg: str = "ok", status_code: int = 200, **kwargs):
        body = {
            "code": 0 if status_code < 400 else status_code,
            "msg": msg,
            "data": jsonable_encoder(data),
        }
        super().__init__(content=body, status_code=status_code, **kwargs)
