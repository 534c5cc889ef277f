from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ignition.core.constants import FieldSizes
from ignition.models.base import Base


class KvEntry(Base):
    key: Mapped[str] = mapped_column(
        String(FieldSizes.SHORT), unique=True, nullable=False, index=True
    )
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")  # JSON text
