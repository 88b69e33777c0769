# tuma_helper/core/notices.py
from typing import Literal, Optional

from pydantic import BaseModel


class Notice(BaseModel):
    """User-facing toast describing the outcome of an action."""

    title: str
    description: Optional[str] = None
    variant: Literal["default", "destructive"] = "default"


def success(title: str, description: Optional[str] = None) -> Notice:
    return Notice(title=title, description=description)


def failure(title: str, description: Optional[str] = None) -> Notice:
    return Notice(title=title, description=description, variant="destructive")


SIGN_IN_REQUIRED = failure("Authentication required", "Please sign in to continue.")
GENERIC_FAILURE = failure("Error", "Something went wrong. Please try again.")
