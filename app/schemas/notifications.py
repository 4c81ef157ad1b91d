import uuid
from datetime import datetime
from pydantic import BaseModel

class NotificationOut(BaseModel):
    id: uuid.UUID
    content: str
    category: str
    is_read: bool
    related_project_id: uuid.UUID | None
    related_task_id: uuid.UUID | None
    created_at: datetime
