from typing import List, Optional

from pydantic import BaseModel, Field

from .participant_schemas import ParticipantSummary
from .user_schemas import EventSummary, UserSummary


class ScoreDetailIn(BaseModel):
    kriteria: str
    nilai: float
    bobot: Optional[float] = None
    catatan: Optional[str] = None


class ScoreDetailCreate(ScoreDetailIn):
    score_id: int


class ScoreDetailUpdate(BaseModel):
    kriteria: Optional[str] = None
    nilai: Optional[float] = None
    bobot: Optional[float] = None
    catatan: Optional[str] = None


class ScoreDetailRead(BaseModel):
    id: int
    score_id: int
    kriteria: str
    nilai: float
    bobot: Optional[float] = None
    catatan: Optional[str] = None

    class Config:
        from_attributes = True


class ScoreCreate(BaseModel):
    event_id: int
    participant_id: int
    # Judges scoring for themselves may leave this out
    judge_id: Optional[int] = None
    use_manual_nilai: bool = False
    nilai: Optional[float] = Field(None, description="Manual value, required when use_manual_nilai is true")
    catatan: Optional[str] = None
    details: Optional[List[ScoreDetailIn]] = None


class ScoreUpdate(BaseModel):
    use_manual_nilai: Optional[bool] = None
    nilai: Optional[float] = None
    catatan: Optional[str] = None


class ScoreRead(BaseModel):
    id: int
    event_id: int
    participant_id: int
    judge_id: int
    nilai: Optional[int] = None
    use_manual_nilai: bool
    catatan: Optional[str] = None
    details: List[ScoreDetailRead] = []
    event: Optional[EventSummary] = None
    participant: Optional[ParticipantSummary] = None
    judge: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class ScoreDetailWithScore(ScoreDetailRead):
    score: Optional[ScoreRead] = None


class BulkDeleteResult(BaseModel):
    message: str
    deleted_count: int
