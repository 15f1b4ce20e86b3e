from gymschedule.api.v1.endpoints.schedule.common import *

logger = logging.getLogger(__name__)

router = APIRouter()


def _run_generation(db: Session, request: GenerationRequest) -> GenerationResult:
    settings = get_settings()
    today = get_today_in_gym_timezone(settings.GYM_TIMEZONE)
    # Cada límite que falte se completa por separado: hoy y hoy + DEFAULT_GENERATION_DAYS
    window_start = request.window_start or today
    window_end = request.window_end or today + timedelta(days=settings.DEFAULT_GENERATION_DAYS)

    engine = RecurrenceEngine(db)
    try:
        return engine.generate(window_start, window_end, series_id=request.series_id)
    except InvalidWindow as e:
        logger.warning(f"Ventana de generación inválida: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RecurrenceError as e:
        logger.error(f"Error generando clases recurrentes: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/generate", response_model=GenerationResult)
def generate_instances(
    request: Optional[GenerationRequest] = Body(None),
    db: Session = Depends(get_db)
) -> Any:
    """
    Generate Class Instances

    Materializes the dated classes of every active series whose period
    overlaps the window. Dates that already have a class for the same
    series are counted as existing and never inserted twice, so the call
    can be repeated safely over the same window.

    Args:
        request (GenerationRequest): Optional window_start, window_end and series_id.
            A missing window_start defaults to today and a missing window_end to today + 35 days.
        db (Session, optional): Database session dependency. Defaults to Depends(get_db).

    Returns:
        GenerationResult: created, existing, series_processed and the applied period.

    Raises:
        HTTPException 400: window_end is before window_start.
        HTTPException 500: The store failed; the message says how many classes were not confirmed.
    """
    return _run_generation(db, request or GenerationRequest())


@router.get("/generate", response_model=GenerationResult)
def generate_instances_get(
    window_start: Optional[date] = Query(None, description="Primer día de la ventana"),
    window_end: Optional[date] = Query(None, description="Último día de la ventana"),
    series_id: Optional[int] = Query(None, description="Generar solo para esta serie"),
    db: Session = Depends(get_db)
) -> Any:
    """
    Generate Class Instances (query string variant)

    Same behavior as the POST variant, with the window passed as query
    parameters.
    """
    request = GenerationRequest(window_start=window_start, window_end=window_end, series_id=series_id)
    return _run_generation(db, request)
