from typing import Optional

from sqlalchemy import BigInteger, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mgstream.db.models.base import Base


class Md5(Base):
    """Surrogate keys for M5NR md5 checksums."""

    __tablename__ = "md5s"

    md5_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    md5: Mapped[str] = mapped_column(String(32), unique=True, index=True)

    def __repr__(self) -> str:
        return f"<Md5 {self.md5_id} {self.md5}>"


class JobMd5(Base):
    """Per-job similarity summary for one md5, with its location in the sims file."""

    __tablename__ = "job_md5s"
    __table_args__ = (
        Index("ix_job_md5s_version_job_seek", "version", "job_id", "seek"),
    )

    row_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    version: Mapped[int]
    job_id: Mapped[int] = mapped_column(ForeignKey("samples.job_id"), index=True)
    md5_id: Mapped[int] = mapped_column(ForeignKey("md5s.md5_id"), index=True)
    abundance: Mapped[int] = mapped_column(default=0)
    exp_avg: Mapped[Optional[float]]    # mean log10 e-value
    ident_avg: Mapped[Optional[float]]  # mean percent identity
    len_avg: Mapped[Optional[float]]    # mean alignment length
    seek: Mapped[Optional[int]] = mapped_column(BigInteger)
    length: Mapped[Optional[int]]

    md5: Mapped["Md5"] = relationship()

    def __repr__(self) -> str:
        return f"<JobMd5 job={self.job_id} md5={self.md5_id} seek={self.seek}>"
