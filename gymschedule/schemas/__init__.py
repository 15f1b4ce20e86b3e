from gymschedule.schemas.schedule import (
    ClassSeries,
    ClassSeriesCreate,
    ClassSeriesUpdate,
    ClassSeriesList,
    ClassInstance,
    ClassInstanceCreate,
    ClassInstanceUpdate,
    ClassInstanceList,
    GenerationRequest,
    GenerationResult,
    CancelRequest,
    CancelResult,
    CancelScope
)
