from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ClickEvent:
    embed_id: str
    clicked_at: datetime
