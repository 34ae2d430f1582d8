from pydantic import BaseModel

ALL = "all"


class ListQuery(BaseModel):
    search: str = ""
    status: str = ALL
    category: str = ALL
    sort: str = "newest"
