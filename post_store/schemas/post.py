import datetime

from pydantic import ConfigDict, constr, model_validator

from post_store.models.camel_model import CamelModel


class PostFilter(CamelModel):
    category: constr(strip_whitespace=True, min_length=1) | None = None
    tag: constr(strip_whitespace=True, min_length=1) | None = None
    date_from: datetime.date | None = None
    date_to: datetime.date | None = None

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def check_date_range(self) -> "PostFilter":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("dateFrom must not be later than dateTo")
        return self


class ValidatePost(CamelModel):
    content: str
    path: str | None = None

    model_config = ConfigDict(extra="ignore")
