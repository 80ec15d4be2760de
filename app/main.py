from fastapi import FastAPI, Depends, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
import uuid
import logging
import time

from app.services.positioning_service import PositioningService
from app.dependencies import get_positioning_service
from app.schemas.positioning_schemas import (
    BoundingBoxRequest,
    BoundingBoxResponse,
    ConstraintsRequest,
    Delimitation,
    DesignTransform,
    DisplayRectRequest,
    DisplayRectResponse,
    DisplaySize,
    DragRequest,
    ErrorResponse,
    ImageMetrics,
    LiveSessionInit,
    MetricsRequest,
    NormalizeRequest,
    PlacementRequest,
    PositionConstraints,
    ResolvedPlacement,
    ScaleRequest,
    TransformResponse,
    ValidateZoneRequest,
    ZoneValidationReport,
)
from app.utils.debounce import Debouncer
from app.utils.logging_config import setup_logging, get_logger
from app.config import settings

# Setup logging
logger = setup_logging(
    log_level=logging.DEBUG if settings.DEBUG else logging.INFO,
    log_to_file=settings.LOG_TO_FILE,
    logs_dir=settings.LOGS_DIR
)

# Create the FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Maps vendor design placements between stored, on-screen and print coordinates",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = str(uuid.uuid4())
    logger.info(f"Request {request_id} started: {request.method} {request.url.path}")

    start_time = time.time()
    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(f"Request {request_id} completed: {response.status_code} in {process_time:.4f}s")
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"Request {request_id} failed after {process_time:.4f}s: {str(e)}")
        return JSONResponse(
            status_code=500,
            content={"detail": f"Internal server error: {str(e)}"}
        )

# Add exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": f"Internal server error: {str(exc)}"}
    )

@app.get("/")
async def root():
    """Health check endpoint"""
    logger.debug("Health check endpoint called")
    return {"status": "ok", "message": "Design Positioning API is running"}

@app.post(
    "/delimitations/normalize",
    response_model=Delimitation,
    responses={400: {"model": ErrorResponse}}
)
async def normalize_delimitation(
    body: NormalizeRequest,
    positioning_service: PositioningService = Depends(get_positioning_service)
):
    """Convert a delimitation to percent of its image size"""
    req_logger = get_logger(__name__)
    try:
        return positioning_service.normalize_delimitation(body.delimitation)
    except ValueError as e:
        req_logger.warning(f"Validation error: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))

@app.post(
    "/delimitations/validate",
    response_model=ZoneValidationReport,
    responses={400: {"model": ErrorResponse}}
)
async def validate_delimitation(
    body: ValidateZoneRequest,
    positioning_service: PositioningService = Depends(get_positioning_service)
):
    """Check that a delimitation fits its image and has a usable shape"""
    req_logger = get_logger(__name__)
    try:
        return positioning_service.validate_delimitation(body.delimitation, body.image)
    except ValueError as e:
        req_logger.warning(f"Validation error: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))

@app.post("/positioning/metrics", response_model=ImageMetrics)
async def compute_metrics(
    body: MetricsRequest,
    positioning_service: PositioningService = Depends(get_positioning_service)
):
    """Where the product image lands inside a viewport box"""
    return positioning_service.compute_metrics(body.image, body.container, body.fit_mode)

@app.post(
    "/positioning/display-rect",
    response_model=DisplayRectResponse,
    responses={400: {"model": ErrorResponse}}
)
async def compute_display_rect(
    body: DisplayRectRequest,
    positioning_service: PositioningService = Depends(get_positioning_service)
):
    """Map a delimitation onto the current viewport"""
    req_logger = get_logger(__name__)
    try:
        metrics, rect, warnings = positioning_service.compute_display_rect(
            body.delimitation, body.image, body.container, body.fit_mode
        )
        return DisplayRectResponse(metrics=metrics, rect=rect, warnings=warnings)
    except ValueError as e:
        req_logger.warning(f"Validation error: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))

@app.post(
    "/positioning/constraints",
    response_model=PositionConstraints,
    responses={400: {"model": ErrorResponse}}
)
async def compute_constraints(
    body: ConstraintsRequest,
    positioning_service: PositioningService = Depends(get_positioning_service)
):
    """Legal offset range for a design at a given scale"""
    req_logger = get_logger(__name__)
    try:
        return positioning_service.compute_constraints(body.delimitation, body.scale, body.image)
    except ValueError as e:
        req_logger.warning(f"Validation error: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))

@app.post(
    "/positioning/placement",
    response_model=ResolvedPlacement,
    responses={400: {"model": ErrorResponse}}
)
async def resolve_placement(
    body: PlacementRequest,
    positioning_service: PositioningService = Depends(get_positioning_service)
):
    """Resolve a stored transform on the current viewport"""
    req_logger = get_logger(__name__)
    try:
        return positioning_service.resolve_placement(
            body.delimitation,
            body.transform,
            body.image,
            body.container,
            fit_mode=body.fit_mode,
            reference_size=body.reference_size,
            last_known_good=body.last_known_good
        )
    except ValueError as e:
        req_logger.warning(f"Validation error: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))

@app.post(
    "/positioning/drag",
    response_model=TransformResponse,
    responses={400: {"model": ErrorResponse}}
)
async def drag_design(
    body: DragRequest,
    positioning_service: PositioningService = Depends(get_positioning_service)
):
    """Move a design by a pointer delta measured on screen"""
    req_logger = get_logger(__name__)
    try:
        transform, warnings = positioning_service.drag(
            body.delimitation,
            body.transform,
            body.dx,
            body.dy,
            body.image,
            body.container,
            fit_mode=body.fit_mode
        )
        return TransformResponse(transform=transform, warnings=warnings)
    except ValueError as e:
        req_logger.warning(f"Validation error: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))

@app.post(
    "/positioning/scale",
    response_model=TransformResponse,
    responses={400: {"model": ErrorResponse}}
)
async def scale_design(
    body: ScaleRequest,
    positioning_service: PositioningService = Depends(get_positioning_service)
):
    """Rescale a design and keep its offset legal"""
    req_logger = get_logger(__name__)
    try:
        transform, warnings = positioning_service.rescale(
            body.delimitation, body.transform, body.scale, body.image
        )
        return TransformResponse(transform=transform, warnings=warnings)
    except ValueError as e:
        req_logger.warning(f"Validation error: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))

@app.post(
    "/positioning/bounding-box",
    response_model=BoundingBoxResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def compile_bounding_box(
    body: BoundingBoxRequest,
    positioning_service: PositioningService = Depends(get_positioning_service)
):
    """
    Compile the pixel rectangle handed to the compositor

    - **delimitation**: zone the design is placed in, pixel or percentage
    - **transform**: offset from the zone center (original pixels), scale and rotation
    - **image**: intrinsic size of the product photo, required for percentage zones
      that do not carry imageWidth/imageHeight
    """
    req_logger = get_logger(__name__)
    try:
        box, payload, warnings = positioning_service.build_compositor_payload(
            body.delimitation, body.transform, body.image
        )
        return BoundingBoxResponse(bounding_box=box, payload=payload, warnings=warnings)
    except ValueError as e:
        req_logger.warning(f"Validation error: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        req_logger.error(f"Error compiling bounding box: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error compiling bounding box: {str(e)}")

@app.websocket("/positioning/live")
async def live_positioning(
    websocket: WebSocket,
    positioning_service: PositioningService = Depends(get_positioning_service)
):
    """
    Re-resolve a placement as the host viewport is resized

    The first message initializes the session (delimitation, transform, image,
    fitMode, referenceSize). Then:
    - **resize** `{width, height}`: debounced, one render per burst
    - **transform** `{transform}`: applied immediately
    - **close**: ends the session
    """
    req_logger = get_logger(__name__)
    await websocket.accept()

    try:
        init = LiveSessionInit.model_validate(await websocket.receive_json())
    except ValidationError as e:
        req_logger.warning(f"Invalid live session init: {str(e)}")
        await websocket.send_json({"type": "error", "detail": str(e)})
        await websocket.close(code=1003)
        return

    rebinder = positioning_service.create_rebinder(
        init.delimitation, init.transform, init.image, init.fit_mode, init.reference_size
    )

    async def send_state(state, source):
        if state is None:
            return
        await websocket.send_json({
            "type": "render",
            "source": source,
            "state": state.model_dump(mode="json", by_alias=True),
        })

    async def on_resize(size: DisplaySize):
        try:
            state = rebinder.on_container_resize(size.width, size.height)
        except ValueError as e:
            req_logger.warning(f"Resize to {size.width}x{size.height} failed: {str(e)}")
            await websocket.send_json({"type": "error", "detail": str(e)})
            return
        await send_state(state, "resize")

    debouncer = Debouncer(settings.RESIZE_DEBOUNCE_SECONDS, on_resize)
    req_logger.info(f"Live positioning session started for delimitation {init.delimitation.id!r}")

    try:
        while True:
            message = await websocket.receive_json()
            message_type = message.get("type")

            try:
                if message_type == "resize":
                    # Checked before the debounce delay
                    size = DisplaySize(width=message["width"], height=message["height"])
                    debouncer.trigger(size)
                elif message_type == "transform":
                    transform = DesignTransform.model_validate(message["transform"])
                    await send_state(rebinder.rebind_transform(transform), "transform")
                elif message_type == "close":
                    await debouncer.flush()
                    await websocket.close()
                    break
                else:
                    await websocket.send_json({"type": "error", "detail": f"Unknown message type: {message_type}"})
            except (KeyError, TypeError, ValueError) as e:
                req_logger.warning(f"Invalid live message {message_type}: {str(e)}")
                await websocket.send_json({"type": "error", "detail": str(e)})
    except WebSocketDisconnect:
        req_logger.info("Live positioning session disconnected")
    finally:
        debouncer.cancel()
