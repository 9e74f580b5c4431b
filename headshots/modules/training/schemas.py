from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class TrainingProgress(BaseModel):
    tune_id: str
    user_id: str
    status: str = "waiting"  # waiting, training, complete, error, cancelled
    progress: int = 5
    attempts: int = 0
    simulated: bool = False
    active: bool = False
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    notified: bool = False
