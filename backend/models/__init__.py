from models.base import Base
from models.college_timing import CollegeTiming
from models.department import Department
from models.room import Room
from models.section import Section
from models.staff import Staff, StaffSubject
from models.student import PersonalizedTimetable, Student
from models.subject import Subject
from models.timetable import Timetable

__all__ = [
	"Base",
	"CollegeTiming",
	"Department",
	"PersonalizedTimetable",
	"Room",
	"Section",
	"Staff",
	"StaffSubject",
	"Student",
	"Subject",
	"Timetable",
]
