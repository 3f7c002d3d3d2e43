from pydantic import BaseModel


class Game(BaseModel):
    id: str
    name: str
    url: str
    desc: str = ""
