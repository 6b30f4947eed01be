"""
Placement records kept on the student document.

These are recorded by an operator; they are never derived from an
application reaching ``Selected``.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class OfferType(str, Enum):
    regular = "Regular"
    ppo = "PPO"
    lateral = "Lateral"


class CompletionStatus(str, Enum):
    completed = "Completed"
    ongoing = "Ongoing"
    discontinued = "Discontinued"


class PerformanceRating(str, Enum):
    excellent = "Excellent"
    good = "Good"
    average = "Average"
    below_average = "Below Average"


class FinalPlacement(BaseModel):
    company_name: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    ctc: Optional[float] = Field(None, ge=0)
    joining_date: Optional[datetime] = None
    work_location: Optional[str] = None
    offer_type: Optional[OfferType] = None
    placed_at: Optional[datetime] = None
    is_current_job: bool = True


class CompletedInternship(BaseModel):
    company_name: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    duration: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    stipend: Optional[float] = Field(None, ge=0)
    completion_status: CompletionStatus = CompletionStatus.completed
    ppo_received: bool = False
    ppo_ctc: Optional[float] = Field(None, ge=0)
    ppo_accepted: bool = False
    certificate_received: bool = False
    performance_rating: Optional[PerformanceRating] = None
    feedback: Optional[str] = None
