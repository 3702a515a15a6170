from pydantic import BaseModel, Field
from typing import Annotated, List, Literal, Optional, Union


class SingleUrl(BaseModel):
    kind: Literal["single_url"] = "single_url"
    url: str
    type: Optional[str] = None

class UrlList(BaseModel):
    kind: Literal["url_list"] = "url_list"
    urls: List[str] = []

class AggregatedCount(BaseModel):
    kind: Literal["aggregated"] = "aggregated"
    count: int = 0
    types: List[str] = []

Evidence = Annotated[Union[SingleUrl, UrlList, AggregatedCount], Field(discriminator="kind")]
