from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from mgstream.db.models.base import Base, TimestampMixin


class Sample(TimestampMixin, Base):
    """One metagenome processing job."""

    __tablename__ = "samples"

    job_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    metagenome_id: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(200))
    public: Mapped[bool] = mapped_column(default=False)
    viewable: Mapped[bool] = mapped_column(default=True)
    owner: Mapped[Optional[str]] = mapped_column(String(100), index=True)

    @property
    def accession(self) -> str:
        return f"mgm{self.metagenome_id}"

    def __repr__(self) -> str:
        return f"<Sample {self.accession} job={self.job_id}>"
