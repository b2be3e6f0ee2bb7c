from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    ForeignKey,
    BigInteger,
    DateTime,
    Integer,
    Text,
)
from database.engine import Base, BigIntPK
from core.utils.datetime import now
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.users import User


class Engineer(Base):
    """
    Engineer (candidate) profile.

    ``phone_number`` is a private contact field: it is stored in full but
    only shown to a company once contact permission exists.
    """

    __tablename__: str = "engineers"
    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False, unique=True, index=True
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(100))
    current_position: Mapped[str | None] = mapped_column(String(255))
    years_of_experience: Mapped[int | None] = mapped_column(Integer)
    bio: Mapped[str | None] = mapped_column(Text)
    phone_number: Mapped[str | None] = mapped_column(String(30))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )

    user: Mapped["User"] = relationship("User", back_populates="engineer")

    @property
    def name(self) -> str:
        return self.display_name or f"{self.first_name} {self.last_name}"
