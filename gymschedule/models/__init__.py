from gymschedule.models.schedule import (
    ClassSeries,
    ClassInstance,
    ClassCategory,
    ClassType,
    ClassInstanceStatus
)
