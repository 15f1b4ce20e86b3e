"""
Services module for GymSchedule

Services implement the business logic of the application on top of the
repositories: the recurrence engine (generation and cancellation of
classes) and the CRUD services for series and instances.
"""

from gymschedule.services.recurrence import RecurrenceEngine
from gymschedule.services.schedule import ClassSeriesService, ClassInstanceService
