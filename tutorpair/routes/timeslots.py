from fastapi import APIRouter
from pydantic import BaseModel

from ..services.timeslot_calendar import default_calendar

router = APIRouter(prefix="/timeslots", tags=["timeslots"])


class TimeslotResponse(BaseModel):
    code: str
    label: str


@router.get("", response_model=list[TimeslotResponse])
async def list_timeslots():
    """The configured timeslot catalog in day/period order"""
    return [TimeslotResponse(code=c, label=default_calendar.label(c)) for c in default_calendar.codes]
