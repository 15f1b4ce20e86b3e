from gymschedule.api.v1.endpoints.schedule.common import *

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ClassSeriesList)
def get_series_list(
    active: Optional[bool] = Query(None, description="Filtrar por series activas o inactivas"),
    category: Optional[ClassCategory] = Query(None),
    class_type: Optional[ClassType] = Query(None),
    db: Session = Depends(get_db)
) -> Any:
    """
    Get Class Series

    Lists the recurring class series ordered by weekday and start time.

    Args:
        active (bool, optional): Only active (true) or inactive (false) series.
        category (ClassCategory, optional): child, adult or all.
        class_type (ClassType, optional): group or individual.
        db (Session, optional): Database session dependency.

    Returns:
        ClassSeriesList: The series and how many were returned.
    """
    service = ClassSeriesService(db)
    try:
        series, count = service.list_series(active=active, category=category, class_type=class_type)
    except StoreError as e:
        raise_service_error(e)
    return {"data": series, "count": count}


@router.post("", response_model=ClassSeries, status_code=status.HTTP_201_CREATED)
def create_series(
    series_data: ClassSeriesCreate = Body(...),
    db: Session = Depends(get_db)
) -> Any:
    """
    Create Class Series

    Creates a weekly recurring class. No instances are generated until
    the generation endpoint is called.

    Raises:
        HTTPException 422: Invalid body (times or period out of order).
        HTTPException 500: The store rejected the insert.
    """
    service = ClassSeriesService(db)
    try:
        return service.create_series(series_data)
    except StoreError as e:
        raise_service_error(e)


@router.get("/{series_id}", response_model=ClassSeries)
def get_series(
    series_id: int = Path(..., description="ID de la serie"),
    db: Session = Depends(get_db)
) -> Any:
    service = ClassSeriesService(db)
    try:
        return service.get_series(series_id)
    except NotFoundError as e:
        raise_service_error(e)


@router.patch("/{series_id}", response_model=ClassSeries)
def update_series(
    series_id: int = Path(..., description="ID de la serie"),
    series_data: ClassSeriesUpdate = Body(...),
    db: Session = Depends(get_db)
) -> Any:
    """
    Update Class Series

    Partially updates a series. Already generated instances keep their
    own values; only future generations use the new ones.

    Raises:
        HTTPException 400: The merged times or period are inconsistent.
        HTTPException 404: Series not found.
        HTTPException 500: The store rejected the update.
    """
    service = ClassSeriesService(db)
    try:
        return service.update_series(series_id, series_data)
    except (NotFoundError, ValidationError, StoreError) as e:
        if isinstance(e, ValidationError):
            logger.warning(f"Actualización inválida de la serie {series_id}: {e}")
        raise_service_error(e)


@router.delete("/{series_id}", response_model=OperationResult)
def delete_series(
    series_id: int = Path(..., description="ID de la serie"),
    cancel_future: bool = Query(False, description="Cancelar también las clases desde hoy"),
    db: Session = Depends(get_db)
) -> Any:
    """
    Retire Class Series

    Deactivates the series as of today (gym timezone). Past instances are
    kept; with cancel_future=true the instances from today on are
    canceled as well.

    Raises:
        HTTPException 404: Series not found.
        HTTPException 500: The store rejected one of the writes.
    """
    service = ClassSeriesService(db)
    try:
        service.retire_series(series_id, cancel_future=cancel_future)
    except (NotFoundError, StoreError) as e:
        raise_service_error(e)
    return OperationResult()
