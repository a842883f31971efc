from datetime import date, datetime
from decimal import Decimal
from typing import Any

import orjson
from fastapi.encoders import jsonable_encoder


def _default(o: Any):
    if isinstance(o, Decimal):
        return str(o)
    if isinstance(o, (datetime, date)):
        return o.isoformat()
    raise TypeError(f"Type is not JSON serializable: {type(o).__name__}")


def dumps(obj: Any) -> str:
    """Serialize obj to a compact JSON string, keeping Decimals exact."""
    payload = jsonable_encoder(obj, custom_encoder={Decimal: str})
    return orjson.dumps(payload, option=orjson.OPT_NON_STR_KEYS, default=_default).decode("utf-8")


def loads(data: str | bytes) -> Any:
    return orjson.loads(data)
