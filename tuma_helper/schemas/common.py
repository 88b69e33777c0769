# tuma_helper/schemas/common.py
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from tuma_helper.core.notices import Notice

T = TypeVar("T")


class ActionResult(BaseModel, Generic[T]):
    notice: Notice
    data: Optional[T] = None
