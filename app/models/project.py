import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import DEFAULT_STATUSES

def default_statuses() -> list[dict]:
    return [{"name": name, "order": i} for i, name in enumerate(DEFAULT_STATUSES, start=1)]

class Project(Base):
    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), index=True, nullable=False)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # ordered [{"name": ..., "order": ...}]
    statuses: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=default_statuses)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    members: Mapped[list["ProjectMember"]] = relationship(
        back_populates="project", cascade="all, delete-orphan", lazy="selectin"
    )

    @property
    def status_names(self) -> list[str]:
        return [s["name"] for s in sorted(self.statuses or [], key=lambda s: s.get("order", 0))]

    def has_status(self, name: str) -> bool:
        return name in self.status_names

    def is_participant(self, user_id: uuid.UUID) -> bool:
        if self.owner_id == user_id:
            return True
        return any(m.user_id == user_id for m in self.members)
