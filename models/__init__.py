from models.department import Department
from models.teacher import Teacher
from models.subject import Subject
from models.room import Room
from models.timeslot import TimeSlot
from models.day import Day
from models.semester import Semester
from models.allocation import Allocation

__all__ = [
    "Department",
    "Teacher",
    "Subject",
    "Room",
    "TimeSlot",
    "Day",
    "Semester",
    "Allocation",
]
