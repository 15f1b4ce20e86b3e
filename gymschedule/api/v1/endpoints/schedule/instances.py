from gymschedule.api.v1.endpoints.schedule.common import *
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ClassInstanceList)
def get_instances(
    status_filter: Optional[ClassInstanceStatus] = Query(None, alias="status"),
    category: Optional[ClassCategory] = Query(None),
    date_from: Optional[date] = Query(None, description="Desde esta fecha (inclusive)"),
    date_to: Optional[date] = Query(None, description="Hasta esta fecha (inclusive)"),
    limit: Optional[int] = Query(None, description="Máximo de clases (1..200, por defecto 100)"),
    db: Session = Depends(get_db)
) -> Any:
    """
    Get Class Instances

    Lists dated classes ordered by date and start time. The limit is
    clamped to the configured bounds instead of being rejected.

    Args:
        status (ClassInstanceStatus, optional): scheduled, held or canceled.
        category (ClassCategory, optional): child, adult or all.
        date_from (date, optional): First date included.
        date_to (date, optional): Last date included.
        limit (int, optional): Maximum number of classes.
        db (Session, optional): Database session dependency.

    Returns:
        ClassInstanceList: The classes and how many were returned.
    """
    service = ClassInstanceService(db)
    try:
        instances, count = service.list_instances(
            status=status_filter,
            category=category,
            date_from=date_from,
            date_to=date_to,
            limit=limit
        )
    except StoreError as e:
        raise_service_error(e)
    return {"data": instances, "count": count}


@router.post("", response_model=ClassInstance, status_code=status.HTTP_201_CREATED)
def create_instance(
    instance_data: ClassInstanceCreate = Body(...),
    db: Session = Depends(get_db)
) -> Any:
    """
    Create Class Instance

    Creates a one-off class that does not belong to any series.

    Raises:
        HTTPException 400: The date is in the past.
        HTTPException 500: The store rejected the insert.
    """
    service = ClassInstanceService(db)
    try:
        return service.create_instance(instance_data)
    except (ValidationError, StoreError) as e:
        raise_service_error(e)


@router.get("/{instance_id}", response_model=ClassInstance)
def get_instance(
    instance_id: int = Path(..., description="ID de la clase"),
    db: Session = Depends(get_db)
) -> Any:
    service = ClassInstanceService(db)
    try:
        return service.get_instance(instance_id)
    except NotFoundError as e:
        raise_service_error(e)


@router.patch("/{instance_id}", response_model=ClassInstance)
def update_instance(
    instance_id: int = Path(..., description="ID de la clase"),
    instance_data: ClassInstanceUpdate = Body(...),
    db: Session = Depends(get_db)
) -> Any:
    """
    Update Class Instance

    Partially updates a class. Also used to mark it as held or canceled
    without touching the rest of its series.
    """
    service = ClassInstanceService(db)
    try:
        return service.update_instance(instance_id, instance_data)
    except (NotFoundError, ValidationError, StoreError) as e:
        raise_service_error(e)


async def get_cancel_request(request: Request) -> CancelRequest:
    """Cuerpo opcional del DELETE; si falta o no se puede leer se usa scope=single."""
    body = await request.body()
    if not body:
        return CancelRequest()
    try:
        return CancelRequest.model_validate_json(body)
    except PydanticValidationError:
        logger.warning("Cuerpo de cancelación ilegible, se aplica scope=single")
        return CancelRequest()


@router.delete("/{instance_id}", response_model=CancelResult)
def cancel_instance(
    instance_id: int = Path(..., description="ID de la clase"),
    cancel_request: CancelRequest = Depends(get_cancel_request),
    db: Session = Depends(get_db)
) -> Any:
    """
    Cancel Class Instance

    Cancels one class (scope=single) or this class and every later class
    of its series (scope=future). With scope=future the series period ends
    the day before the class, and the series is deactivated when no date
    is left in it. A class without series is always canceled alone.

    Args:
        instance_id (int): ID of the class to cancel.
        cancel_request (CancelRequest, optional): {"scope": "single" | "future"}.
            A missing or unreadable body means single.
        db (Session, optional): Database session dependency.

    Returns:
        CancelResult: ok and the scope actually applied.

    Raises:
        HTTPException 404: Class not found.
        HTTPException 500: The store rejected the cancellation.
    """
    engine = RecurrenceEngine(db)
    try:
        return engine.cancel(instance_id, scope=cancel_request.scope)
    except InstanceNotFound as e:
        logger.warning(str(e))
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except RecurrenceError as e:
        logger.error(f"Error cancelando la clase {instance_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
