from datetime import datetime
from typing import Annotated
from uuid import uuid4

from pydantic import AfterValidator, Field

from ..utils.date_utils import ensure_mongodb_compatible, get_utc_now

# Every timestamp is normalized to naive UTC so values read back from the
# remote store, the local cache and the API compare and sort together.
UTCDateTime = Annotated[datetime, AfterValidator(ensure_mongodb_compatible)]


def new_id() -> str:
    return str(uuid4())


def timestamp_field():
    return Field(default_factory=get_utc_now)
