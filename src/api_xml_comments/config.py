"""Settings for merging XML comments into API documents."""

import os
from typing import Literal

from pydantic import BaseModel, Field

CREF_STYLE_ENV = "API_XML_COMMENTS_CREF_STYLE"


class MergeSettings(BaseModel):
    """Merge options. Defaults come from the environment, CLI options override."""

    cref_style: Literal["full", "short"] = Field(
        default_factory=lambda: os.getenv(CREF_STYLE_ENV, "full"),
        validate_default=True,
    )
