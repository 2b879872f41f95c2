from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from database import Base

COSMETIC_FIELDS = (
    "gender",
    "skin_tone",
    "hair_style",
    "hair_color",
    "shirt_style",
    "shirt_color",
    "pants_style",
    "pants_color",
    "accessory",
)


class Avatar(Base):
    __tablename__ = "user_avatars"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    gender = Column(String(20), default="non-binary")  # male/female/non-binary
    skin_tone = Column(String(20), default="medium")
    hair_style = Column(String(30), default="short")
    hair_color = Column(String(20), default="brown")
    shirt_style = Column(String(30), default="tshirt")
    shirt_color = Column(String(20), default="blue")
    pants_style = Column(String(30), default="shorts")
    pants_color = Column(String(20), default="black")
    accessory = Column(String(30), default="none")
    vitality_level = Column(Integer, default=1, nullable=False)  # 1-5, derived from weekly points
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self) -> dict:
        data = {"id": self.id, "user_id": self.user_id, "vitality_level": self.vitality_level}
        for field in COSMETIC_FIELDS:
            data[field] = getattr(self, field)
        return data
